# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware producing RFC 7807 problem documents.

Domain failures are raised as ``CustomException`` subclasses and mapped to
problem types here; werkzeug HTTP errors and unexpected exceptions are
mapped through the same formatter.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Any, Dict, Tuple
from opentelemetry import trace
import logging

from services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

PROBLEM_CONTENT_TYPE = 'application/problem+json'

# Problem type and title for HTTP errors raised by Flask itself
HTTP_PROBLEMS: Dict[int, Tuple[str, str]] = {
    400: ("bad-request", "Bad Request"),
    401: ("authentication-required", "Authentication Required"),
    403: ("insufficient-permissions", "Insufficient Permissions"),
    404: ("resource-not-found", "Resource Not Found"),
    409: ("resource-conflict", "Resource Conflict"),
}


def problem_response(body: Dict[str, Any], status: int):
    response = jsonify(body)
    response.status_code = status
    response.headers['Content-Type'] = PROBLEM_CONTENT_TYPE
    return response


class ErrorHandlerMiddleware:
    """Maps HTTP errors and unexpected exceptions to problem documents."""

    def __init__(self, app: Flask, base_url: str):
        self.app = app
        self.hal_formatter = HalFormatter(base_url)
        app.register_error_handler(HTTPException, self.handle_http_error)
        app.register_error_handler(Exception, self.handle_unexpected_error)

    @property
    def is_production(self) -> bool:
        return self.app.config.get('ENVIRONMENT') == 'production'

    def handle_http_error(self, error: HTTPException):
        """
        Handle werkzeug HTTP errors such as unknown routes or methods.

        Args:
            error: HTTP exception

        Returns:
            Problem response carrying the error's status code
        """
        status = error.code or 500
        default_type = "server-error" if status >= 500 else "client-error"
        error_type, title = HTTP_PROBLEMS.get(status, (default_type, error.name))
        detail = str(error.description) if error.description else title

        with tracer.start_as_current_span("error_handler.http_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": status,
                "http.method": request.method,
                "http.path": request.path
            })

            log = logger.error if status >= 500 else logger.warning
            log(
                f"HTTP error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": status,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method
                }
            )

            if status >= 500 and self.is_production:
                detail = "An internal server error occurred"

            body = self.hal_formatter.builder.build_error_response(
                error_type, title, status, detail, request.path
            )
            return problem_response(body, status)

    def handle_unexpected_error(self, error: Exception):
        """Log the traceback and answer 500; details are hidden in production."""
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_type": "unexpected-error",
                    "error_class": error.__class__.__name__,
                    "path": request.path,
                    "method": request.method
                },
                exc_info=error
            )

            detail = "An unexpected error occurred"
            if not self.is_production:
                detail = f"{error.__class__.__name__}: {str(error)}"

            return problem_response(self.hal_formatter.format_server_error(detail, request.path), 500)


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for validation errors."""

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationException(CustomException):
    """Missing, malformed or expired bearer token."""

    def __init__(self, message: str):
        super().__init__(message, 401, "authentication-required")


class AuthorizationException(CustomException):
    """Actor lacks the role or ownership an operation requires."""

    def __init__(self, message: str):
        super().__init__(message, 403, "insufficient-permissions")


class NotFoundException(CustomException):
    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class ConflictException(CustomException):
    """Exception for state conflicts: invalid transitions, duplicates and lost races."""

    def __init__(self, message: str):
        super().__init__(message, 409, "resource-conflict")


class TransientStoreException(CustomException):
    """Exception for a temporarily unreachable data store; the caller may retry."""

    def __init__(self, message: str):
        super().__init__(message, 503, "service-unavailable")


def _format_custom_exception(hal_formatter: HalFormatter, error: CustomException) -> Dict[str, Any]:
    if isinstance(error, ValidationException):
        return hal_formatter.format_validation_error(error.message, request.path, error.validation_errors)

    formatters = {
        AuthenticationException: hal_formatter.format_authentication_error,
        AuthorizationException: hal_formatter.format_authorization_error,
        NotFoundException: hal_formatter.format_not_found_error,
        ConflictException: hal_formatter.format_conflict_error,
        TransientStoreException: hal_formatter.format_service_unavailable_error,
    }
    formatter = formatters.get(type(error))
    if formatter is None:
        return hal_formatter.format_server_error(error.message, request.path, error.status_code)
    return formatter(error.message, request.path)


def register_custom_error_handlers(app: Flask, hal_formatter: HalFormatter):
    """
    Register the handler for domain exceptions.

    Args:
        app: Flask application
        hal_formatter: HAL formatter instance
    """

    @app.errorhandler(CustomException)
    def handle_custom_exception(error: CustomException):
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            log = logger.error if error.status_code >= 500 else logger.warning
            log(
                f"Custom exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "error_message": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            response = problem_response(_format_custom_exception(hal_formatter, error), error.status_code)
            if isinstance(error, AuthenticationException):
                response.headers['WWW-Authenticate'] = 'Bearer'
            return response
