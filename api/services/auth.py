# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for verifying identity-provider JWTs.

Credentials are issued upstream. This module verifies RS256 access tokens,
turns their claims into an ActorContext and, for development and tests only,
mints tokens with a locally generated key pair.
"""

import os
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from opentelemetry import trace
from pydantic import ValidationError
import logging

from models.entities import ActorContext

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a token cannot be issued."""
    pass


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


def generate_key_pair() -> Tuple[str, str]:
    """Generate an RSA key pair in PEM format."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048
    )

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('utf-8')

    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')

    return private_pem, public_pem


class AuthService:
    """
    JWT verification service for identity-provider tokens signed with RS256.

    The service trusts the ``sub``, ``role`` and ``name`` claims of a token
    whose signature and expiry check out.
    """

    def __init__(self, private_key: Optional[str] = None, public_key: Optional[str] = None):
        """
        Initialize the authentication service.

        Args:
            private_key: RS256 private key for development token signing (PEM format)
            public_key: RS256 public key for token verification (PEM format)
        """
        private_key = private_key or os.getenv("JWT_PRIVATE_KEY")
        public_key = public_key or os.getenv("JWT_PUBLIC_KEY")

        if not public_key:
            logger.warning("No JWT_PUBLIC_KEY found, generating development key pair")
            private_key, public_key = generate_key_pair()

        self.private_key = private_key
        self.public_key = public_key
        self.algorithm = "RS256"
        self.access_token_expire_minutes = 15

    def issue_token(
        self,
        subject_id: str,
        role: str,
        name: Optional[str] = None,
        expires_in_minutes: Optional[int] = None
    ) -> str:
        """
        Mint an access token with the development private key.

        Args:
            subject_id: Subject identifier
            role: citizen or admin
            name: Optional display name
            expires_in_minutes: Lifetime override

        Returns:
            Encoded JWT
        """
        if not self.private_key:
            raise AuthenticationError("No private key configured for token issuance")

        now = datetime.now(timezone.utc)
        minutes = self.access_token_expire_minutes if expires_in_minutes is None else expires_in_minutes
        payload = {
            "sub": subject_id,
            "role": role,
            "iat": now,
            "exp": now + timedelta(minutes=minutes),
            "type": "access"
        }
        if name:
            payload["name"] = name

        return jwt.encode(payload, self.private_key, algorithm=self.algorithm)

    def validate_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """
        Validate and decode a JWT token.

        Args:
            token: JWT token string to validate
            token_type: Expected token type

        Returns:
            Decoded token payload

        Raises:
            TokenValidationError: If token is invalid or expired
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            span.set_attributes({
                "auth.operation": "validate_token",
                "auth.token_type": token_type
            })

            try:
                payload = jwt.decode(
                    token,
                    self.public_key,
                    algorithms=[self.algorithm],
                    options={"verify_exp": True, "require": ["sub", "exp"]}
                )
            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError("Token has expired")
            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(f"Invalid token: {str(e)}")

            if payload.get("type") != token_type:
                span.set_attribute("auth.validation_result", "wrong_type")
                raise TokenValidationError(f"Invalid token type. Expected {token_type}")

            span.set_attributes({
                "auth.validation_result": "success",
                "user.id": payload.get("sub"),
                "user.role": str(payload.get("role"))
            })

            logger.debug(
                "Token validated successfully",
                extra={"user_id": payload.get("sub"), "role": payload.get("role")}
            )

            return payload

    def build_actor(
        self,
        payload: Dict[str, Any],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> ActorContext:
        """
        Build the actor context from validated token claims.

        Raises:
            TokenValidationError: If the role claim is missing or unknown
        """
        try:
            return ActorContext(
                subject_id=str(payload["sub"]),
                role=payload.get("role"),
                name=payload.get("name"),
                ip_address=ip_address,
                user_agent=user_agent
            )
        except (KeyError, ValidationError) as e:
            logger.warning(f"Token claims rejected: {e}")
            raise TokenValidationError("Token does not carry a valid role")
