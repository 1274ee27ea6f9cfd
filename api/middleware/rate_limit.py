# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Rate limiting middleware for public API endpoints.
Provides fixed-window rate limiting with a Redis backend.
"""

from functools import wraps
from flask import current_app, request, jsonify
from typing import Dict, Any, Optional, Callable
import time
import hashlib
import logging

from services.hal import HalFormatter

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_LIMIT = 300
DEFAULT_WINDOW_SECONDS = 3600


class RateLimiter:
    """Redis-based rate limiter with a fixed window per client and endpoint."""

    def __init__(self, redis_service, hal_formatter: HalFormatter):
        self.redis_service = redis_service
        self.hal_formatter = hal_formatter

    def get_client_identifier(self) -> str:
        """
        Get an anonymous identifier for the calling client.

        Returns:
            Hash of the client IP address and User-Agent
        """
        ip_address = request.remote_addr or 'unknown'
        user_agent = request.headers.get('User-Agent', '')

        identifier_string = f"{ip_address}:{user_agent}"
        identifier_hash = hashlib.md5(identifier_string.encode()).hexdigest()
        return f"ip:{identifier_hash}"

    def get_rate_limit_key(self, identifier: str, endpoint: str, window_seconds: int) -> str:
        """
        Generate Redis key for rate limiting.

        Args:
            identifier: Client identifier
            endpoint: Endpoint identifier
            window_seconds: Time window in seconds

        Returns:
            Redis key for the current window
        """
        window_start = int(time.time()) // window_seconds
        return f"rate_limit:{identifier}:{endpoint}:{window_start}"

    def check_rate_limit(
        self,
        identifier: str,
        endpoint: str,
        limit: int,
        window_seconds: int = DEFAULT_WINDOW_SECONDS
    ) -> Dict[str, Any]:
        """
        Count the request and check it against the limit.

        Args:
            identifier: Client identifier
            endpoint: Endpoint identifier
            limit: Maximum requests allowed per window
            window_seconds: Time window in seconds

        Returns:
            Dictionary with rate limit status
        """
        key = self.get_rate_limit_key(identifier, endpoint, window_seconds)
        now = int(time.time())
        reset_time = (now // window_seconds + 1) * window_seconds

        count = self.redis_service.increment_with_ttl(key, window_seconds) if self.redis_service else None
        if count is None:
            # Fail open when Redis is unavailable
            return {
                'allowed': True,
                'limit': limit,
                'remaining': limit,
                'reset_time': reset_time,
                'retry_after': 0
            }

        allowed = count <= limit
        return {
            'allowed': allowed,
            'limit': limit,
            'remaining': max(limit - count, 0),
            'reset_time': reset_time,
            'retry_after': 0 if allowed else reset_time - now
        }

    def add_rate_limit_headers(self, response, rate_limit_info: Dict[str, Any]):
        """
        Add rate limit headers to response.

        Args:
            response: Flask response object
            rate_limit_info: Rate limit information
        """
        response.headers['X-RateLimit-Limit'] = str(rate_limit_info['limit'])
        response.headers['X-RateLimit-Remaining'] = str(rate_limit_info['remaining'])
        response.headers['X-RateLimit-Reset'] = str(rate_limit_info['reset_time'])

        if rate_limit_info['retry_after'] > 0:
            response.headers['Retry-After'] = str(rate_limit_info['retry_after'])

        return response


def rate_limit(
    limit: Optional[int] = None,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    endpoint: Optional[str] = None
):
    """
    Decorator for rate limiting endpoints.

    Args:
        limit: Maximum requests allowed; defaults to the PUBLIC_RATE_LIMIT setting
        window_seconds: Time window in seconds
        endpoint: Custom endpoint identifier

    Returns:
        Decorator function
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            redis_service = getattr(current_app, 'redis_service', None)
            if redis_service is None:
                return f(*args, **kwargs)

            rate_limiter = RateLimiter(redis_service, current_app.hal_formatter)
            max_requests = limit or int(current_app.config.get('PUBLIC_RATE_LIMIT', DEFAULT_PUBLIC_LIMIT))

            identifier = rate_limiter.get_client_identifier()
            endpoint_name = endpoint or request.endpoint or f.__name__

            rate_limit_info = rate_limiter.check_rate_limit(
                identifier,
                endpoint_name,
                max_requests,
                window_seconds
            )

            if not rate_limit_info['allowed']:
                logger.warning(
                    "Rate limit exceeded",
                    extra={
                        'identifier': identifier,
                        'endpoint': endpoint_name,
                        'limit': max_requests,
                        'retry_after': rate_limit_info['retry_after']
                    }
                )

                error_response = rate_limiter.hal_formatter.format_rate_limit_error(
                    f"Rate limit of {max_requests} requests per {window_seconds} seconds exceeded",
                    request.path
                )

                response = jsonify(error_response)
                response.status_code = 429
                rate_limiter.add_rate_limit_headers(response, rate_limit_info)
                return response

            response = current_app.make_response(f(*args, **kwargs))
            rate_limiter.add_rate_limit_headers(response, rate_limit_info)
            return response

        return decorated_function
    return decorator


def rate_limit_public(f: Callable) -> Callable:
    """Rate limit for unauthenticated endpoints, sized by PUBLIC_RATE_LIMIT."""
    return rate_limit()(f)
