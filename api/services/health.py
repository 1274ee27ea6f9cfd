# SPDX-License-Identifier: Apache-2.0

"""
Health Check Service

Provides health monitoring for the MongoDB store, the Redis rate-limit
backend and basic system metrics.
"""

import os
import time
import psutil
from datetime import datetime
from typing import Dict, Any, Optional
from opentelemetry import trace

from services.mongodb import MongoDBService
from services.redis import RedisService

tracer = trace.get_tracer(__name__)

SERVICE_NAME = "civic-complaints-api"
SERVICE_VERSION = "1.0.0"


class HealthCheckService:
    """Service for system health monitoring."""

    def __init__(self, mongodb_service: MongoDBService, redis_service: Optional[RedisService],
                 environment: str = None):
        self.mongodb_service = mongodb_service
        self.redis_service = redis_service
        self.environment = environment or os.getenv('ENVIRONMENT', 'development')
        self.service_version = SERVICE_VERSION

    def get_comprehensive_health(self) -> Dict[str, Any]:
        """
        Get health status including dependencies and metrics.

        MongoDB is required; an unavailable Redis only degrades rate limiting.
        """
        with tracer.start_as_current_span("health.comprehensive_check") as span:
            start_time = time.time()

            mongodb_health = self.check_mongodb_health()
            redis_health = self.check_redis_health()
            system_metrics = self.get_system_metrics()

            overall_status = self._determine_overall_status(mongodb_health["status"], redis_health["status"])
            response_time_ms = round((time.time() - start_time) * 1000, 2)

            span.set_attributes({
                "health.overall_status": overall_status,
                "health.response_time_ms": response_time_ms,
                "health.mongodb_status": mongodb_health["status"],
                "health.redis_status": redis_health["status"]
            })

            return {
                "status": overall_status,
                "service": SERVICE_NAME,
                "version": self.service_version,
                "environment": self.environment,
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "response_time_ms": response_time_ms,
                "dependencies": {
                    "mongodb": mongodb_health,
                    "redis": redis_health
                },
                "system_metrics": system_metrics
            }

    def check_mongodb_health(self) -> Dict[str, Any]:
        """Check MongoDB connectivity."""
        with tracer.start_as_current_span("health.mongodb_check") as span:
            start_time = time.time()
            health_info = self.mongodb_service.health_check()
            health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
            health_info["last_check"] = datetime.utcnow().isoformat() + "Z"
            span.set_attribute("mongodb.status", health_info["status"])
            return health_info

    def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connectivity."""
        with tracer.start_as_current_span("health.redis_check") as span:
            if self.redis_service is None:
                health_info = {"status": "unavailable", "message": "Redis not configured"}
            else:
                health_info = self.redis_service.health_check()
            health_info["last_check"] = datetime.utcnow().isoformat() + "Z"
            span.set_attribute("redis.status", health_info["status"])
            return health_info

    def get_system_metrics(self) -> Dict[str, Any]:
        """Get basic system performance metrics."""
        try:
            memory = psutil.virtual_memory()
            process = psutil.Process(os.getpid())

            return {
                "cpu_percent": psutil.cpu_percent(interval=None),
                "memory": {
                    "used_mb": round(memory.used / 1024 / 1024, 2),
                    "total_mb": round(memory.total / 1024 / 1024, 2),
                    "percent": memory.percent
                },
                "process": {
                    "rss_mb": round(process.memory_info().rss / 1024 / 1024, 2),
                    "uptime_seconds": round(time.time() - process.create_time(), 2)
                },
                "load_average": list(os.getloadavg()) if hasattr(os, 'getloadavg') else None
            }
        except (psutil.Error, OSError) as e:
            return {
                "error": f"Failed to collect system metrics: {str(e)}"
            }

    @staticmethod
    def _determine_overall_status(mongodb_status: str, redis_status: str) -> str:
        """Determine overall system status based on dependency health."""
        if mongodb_status != "healthy":
            return "unhealthy"
        if redis_status != "healthy":
            return "degraded"
        return "healthy"
