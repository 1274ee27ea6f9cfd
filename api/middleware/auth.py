# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and actor context extraction.

This module provides Flask decorators that validate identity-provider tokens
and store the resulting ActorContext on ``flask.g.actor`` for the handler.
"""

from functools import wraps
from flask import current_app, request, g
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
import logging

from middleware.error_handler import AuthenticationException, AuthorizationException
from models.entities import ActorContext
from services.auth import TokenValidationError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.

    Handles token extraction, validation and actor context building for
    protected endpoints.
    """

    def __init__(self, auth_service):
        """
        Initialize the authentication middleware.

        Args:
            auth_service: JWT authentication service
        """
        self.auth_service = auth_service

    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract JWT token from request headers.

        Returns:
            JWT token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '').strip()

        if not auth_header.lower().startswith('bearer '):
            return None

        return auth_header[7:].strip() or None

    def get_request_info(self) -> Dict[str, Any]:
        return {
            "ip_address": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', '')
        }

    def authenticate(self) -> ActorContext:
        """
        Authenticate the current request.

        Returns:
            ActorContext built from the token claims

        Raises:
            AuthenticationException: If the token is missing or invalid
        """
        with tracer.start_as_current_span("auth.middleware.validate_request") as span:
            span.set_attribute("auth.operation", "validate_request")

            token = self.extract_token_from_request()
            if not token:
                span.set_attribute("auth.result", "missing_token")
                logger.warning("Authentication failed: missing token", extra={"path": request.path})
                raise AuthenticationException("Missing authorization token")

            try:
                payload = self.auth_service.validate_token(token, "access")
                request_info = self.get_request_info()
                actor = self.auth_service.build_actor(payload, **request_info)
            except TokenValidationError as e:
                span.set_attribute("auth.result", "invalid_token")
                logger.warning(f"Authentication failed: {str(e)}", extra={"path": request.path})
                raise AuthenticationException(str(e))

            span.set_attributes({
                "auth.result": "success",
                "user.id": actor.subject_id,
                "user.role": actor.role
            })
            logger.debug(
                "Authentication successful",
                extra={"user_id": actor.subject_id, "role": actor.role, "ip_address": actor.ip_address}
            )
            return actor


def current_actor() -> ActorContext:
    """Actor stored by require_auth for the current request."""
    return g.actor


def require_auth(f: Callable) -> Callable:
    """
    Decorator to require JWT authentication for Flask routes.

    The authenticated actor is available through ``current_actor()``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.actor = current_app.auth_middleware.authenticate()
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str) -> Callable:
    """
    Decorator to require one of the given roles for Flask routes.

    Args:
        roles: Accepted role values

    Returns:
        Decorator function
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        @require_auth
        def decorated_function(*args, **kwargs):
            actor = current_actor()
            with tracer.start_as_current_span("auth.middleware.check_role") as span:
                span.set_attributes({
                    "auth.operation": "check_role",
                    "auth.required_roles": ",".join(roles),
                    "user.id": actor.subject_id
                })

                if actor.role not in roles:
                    span.set_attribute("auth.role_result", "denied")
                    logger.warning(
                        "Authorization failed: role not allowed",
                        extra={
                            "user_id": actor.subject_id,
                            "role": actor.role,
                            "required_roles": list(roles)
                        }
                    )
                    raise AuthorizationException("This operation is not allowed for your role")

                span.set_attribute("auth.role_result", "granted")

            return f(*args, **kwargs)

        return decorated_function
    return decorator
