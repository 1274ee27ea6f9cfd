"""
Civic Complaints API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support, wires
the complaint services, middleware and error handlers, and exposes the
health and status endpoints.
"""

import os
import time
from datetime import datetime
from typing import Any, Dict, Optional
from flask import jsonify
from flask_openapi3 import OpenAPI, Info
from observability.config import setup_observability
from observability.middleware import add_observability_middleware

from middleware.error_handler import ErrorHandlerMiddleware, register_custom_error_handlers
from middleware.validation import validation_error_callback
from middleware.auth import AuthMiddleware
from services.auth import AuthService
from services.complaint_store import ComplaintStore, DEFAULT_TRACKING_ID_MAX_ATTEMPTS
from services.feedback import FeedbackService
from services.hal import create_hal_formatter
from services.health import HealthCheckService, SERVICE_NAME, SERVICE_VERSION
from services.mongodb import MongoDBService
from services.queries import QueryService
from services.redis import RedisService
from services.status_engine import StatusEngine
from services.visibility import VisibilityService

# OpenAPI info
info = Info(
    title="Civic Complaints API",
    version=SERVICE_VERSION,
    description="Civic complaint lifecycle and transparency API with HATEOAS Level-3 support"
)


def load_config() -> Dict[str, Any]:
    """Read application settings from the environment."""
    environment = os.getenv('ENVIRONMENT', 'development')
    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'DOCS_ENABLED': os.getenv('DOCS_ENABLED', 'true').lower() == 'true',
        'OTEL_ENABLED': os.getenv('OTEL_ENABLED', 'true').lower() == 'true',
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000'),

        # Storage
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/civic_complaints_dev'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'civic_complaints_dev'),
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),

        # Identity provider keys
        'JWT_PUBLIC_KEY': os.getenv('JWT_PUBLIC_KEY'),
        'JWT_PRIVATE_KEY': os.getenv('JWT_PRIVATE_KEY'),

        'TRACKING_ID_MAX_ATTEMPTS': int(
            os.getenv('TRACKING_ID_MAX_ATTEMPTS', str(DEFAULT_TRACKING_ID_MAX_ATTEMPTS))
        ),
        'PUBLIC_RATE_LIMIT': int(os.getenv('PUBLIC_RATE_LIMIT', '300')),
        'CREATE_INDEXES': os.getenv('CREATE_INDEXES', 'true').lower() == 'true',
    }


def create_app(
    config: Optional[Dict[str, Any]] = None,
    mongodb_service: Optional[MongoDBService] = None,
    redis_service: Optional[RedisService] = None,
    auth_service: Optional[AuthService] = None
) -> OpenAPI:
    """
    Create and configure the Flask application.

    Args:
        config: Settings overriding the environment
        mongodb_service: Pre-built MongoDB service
        redis_service: Pre-built Redis service; rate limiting is off without one
        auth_service: Pre-built token verification service

    Returns:
        Configured application
    """
    settings = load_config()
    settings.update(config or {})

    observability_on = setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])

    app = OpenAPI(
        __name__,
        info=info,
        doc_ui=settings['DOCS_ENABLED'],
        validation_error_status=400,
        validation_error_callback=validation_error_callback
    )
    app.config.update(settings)

    add_observability_middleware(app, instrument=observability_on)

    # Initialize services
    if mongodb_service is None:
        mongodb_service = MongoDBService(settings['MONGODB_URI'], settings['MONGODB_DATABASE'])
    if settings['CREATE_INDEXES']:
        # Unique tracking and feedback indexes back duplicate detection
        mongodb_service.create_indexes()
    if redis_service is None and settings['ENVIRONMENT'] != 'test':
        redis_service = RedisService(settings['REDIS_URL'])
    if auth_service is None:
        auth_service = AuthService(settings['JWT_PRIVATE_KEY'], settings['JWT_PUBLIC_KEY'])

    complaint_store = ComplaintStore(mongodb_service, max_attempts=settings['TRACKING_ID_MAX_ATTEMPTS'])
    feedback_service = FeedbackService(complaint_store)
    health_service = HealthCheckService(mongodb_service, redis_service, settings['ENVIRONMENT'])

    # Initialize middleware
    hal_formatter = create_hal_formatter(settings['BASE_URL'])
    ErrorHandlerMiddleware(app, settings['BASE_URL'])
    register_custom_error_handlers(app, hal_formatter)

    # Make services available to routes
    app.mongodb_service = mongodb_service
    app.redis_service = redis_service
    app.auth_service = auth_service
    app.auth_middleware = AuthMiddleware(auth_service)
    app.hal_formatter = hal_formatter
    app.health_service = health_service
    app.complaint_store = complaint_store
    app.feedback_service = feedback_service
    app.status_engine = StatusEngine(complaint_store)
    app.visibility_service = VisibilityService(complaint_store)
    app.query_service = QueryService(complaint_store, feedback_service)

    # Register routes
    from routes.complaints import complaints_bp
    from routes.admin import admin_bp
    from routes.public import public_bp

    app.register_api(complaints_bp)
    app.register_api(admin_bp)
    app.register_api(public_bp)

    register_system_routes(app)
    return app


def register_system_routes(app: OpenAPI):
    """Register the health and status endpoints."""

    @app.route('/api/healthz')
    def health_check():
        """Health check with dependency monitoring; 503 when the store is down."""
        health_data = app.health_service.get_comprehensive_health()
        status_code = 503 if health_data["status"] == "unhealthy" else 200

        links = {'self': app.hal_formatter.builder.link_builder.build_self_link('/api/healthz')}
        return jsonify(app.hal_formatter.builder.build_resource_response(health_data, links)), status_code

    @app.route('/api/status')
    def system_status():
        """Configuration summary, feature flags and dependency state."""
        status_data = {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": app.config['ENVIRONMENT'],
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "uptime": _get_application_uptime(app.health_service),
            "configuration": _get_configuration_summary(app),
            "feature_flags": _get_feature_flags_status(app),
            "dependencies": {
                "mongodb": app.health_service.check_mongodb_health(),
                "redis": app.health_service.check_redis_health()
            }
        }

        links = {
            'self': app.hal_formatter.builder.link_builder.build_self_link('/api/status'),
            'health': app.hal_formatter.builder.link_builder.build_link('/api/healthz', title="Health")
        }
        return jsonify(app.hal_formatter.builder.build_resource_response(status_data, links))


def _get_application_uptime(health_service: HealthCheckService) -> Dict[str, Any]:
    metrics = health_service.get_system_metrics()
    process = metrics.get("process")
    if not process:
        return {"error": metrics.get("error", "Process metrics unavailable")}

    return {
        "uptime_seconds": process["uptime_seconds"],
        "started_at": datetime.utcfromtimestamp(time.time() - process["uptime_seconds"]).isoformat() + "Z",
        "process_id": os.getpid()
    }


def _get_configuration_summary(app: OpenAPI) -> Dict[str, Any]:
    """Get configuration validation summary."""
    return {
        "mongodb_configured": bool(app.config.get('MONGODB_URI')),
        "redis_configured": app.redis_service is not None and app.redis_service.is_available(),
        "jwt_public_key_configured": bool(app.config.get('JWT_PUBLIC_KEY')),
        "base_url": app.config.get('BASE_URL', 'not_set'),
        "debug_mode": app.config.get('DEBUG', False),
        "tracking_id_max_attempts": app.config.get('TRACKING_ID_MAX_ATTEMPTS'),
        "public_rate_limit": app.config.get('PUBLIC_RATE_LIMIT')
    }


def _get_feature_flags_status(app: OpenAPI) -> Dict[str, Any]:
    return {
        "docs_enabled": app.config.get('DOCS_ENABLED', False),
        "otel_enabled": app.config.get('OTEL_ENABLED', True),
        "debug_mode": app.config.get('DEBUG', False)
    }


if __name__ == '__main__':
    # Development server
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=application.config['DEBUG']
    )
