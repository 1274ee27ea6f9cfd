# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation helpers using Pydantic models.
Provides error formatting for flask-openapi3 request validation and for
payloads validated inside services.
"""

from flask import current_app, request, jsonify, make_response
from typing import Type, Dict, Any, List, TypeVar, Union
from pydantic import BaseModel, ValidationError
from opentelemetry import trace
import logging

from middleware.error_handler import ValidationException
from services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.

    Args:
        validation_error: Pydantic ValidationError

    Returns:
        List of formatted error dictionaries
    """
    errors = []

    for error in validation_error.errors(include_url=False):
        field_path = ".".join(str(loc) for loc in error["loc"]) or "body"
        errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"]
        })

    return errors


def parse_model(model_class: Type[M], data: Union[M, Dict[str, Any], None]) -> M:
    """
    Validate a payload against a model.

    Args:
        model_class: Pydantic model class
        data: Model instance or raw mapping

    Returns:
        Validated model instance

    Raises:
        ValidationException: With field-level errors when validation fails
    """
    if isinstance(data, model_class):
        return data

    with tracer.start_as_current_span("validation.parse_model") as span:
        span.set_attribute("validation.model", model_class.__name__)
        try:
            validated = model_class.model_validate(data if data is not None else {})
            span.set_attribute("validation.result", "success")
            return validated
        except ValidationError as e:
            span.set_attribute("validation.result", "validation_error")
            errors = format_validation_errors(e)
            logger.info(
                "Payload validation failed",
                extra={"model": model_class.__name__, "errors": errors}
            )
            raise ValidationException(
                f"Validation failed for {model_class.__name__}",
                errors
            )


def validation_error_callback(e: ValidationError):
    """
    Build the response for a request rejected by flask-openapi3 validation.

    Args:
        e: Pydantic ValidationError raised for the path, query or body model

    Returns:
        Flask response carrying an RFC 7807 problem document
    """
    errors = format_validation_errors(e)
    formatter: HalFormatter = getattr(current_app, 'hal_formatter', None) or HalFormatter(
        current_app.config.get('BASE_URL', 'http://localhost:5000')
    )

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.path,
            "method": request.method,
            "errors": errors
        }
    )

    body = formatter.format_validation_error(
        f"Request validation failed for {e.title}",
        request.path,
        errors
    )
    response = make_response(jsonify(body), 400)
    response.headers['Content-Type'] = 'application/problem+json'
    return response
