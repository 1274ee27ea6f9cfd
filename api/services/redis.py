# SPDX-License-Identifier: Apache-2.0

"""
Redis service for rate-limit counters and short-lived cache entries.

Uses the standard redis-py client. Every operation degrades gracefully:
when Redis is unreachable the caller gets None/False instead of an error.
"""

import os
import json
import time
from typing import Optional, List, Dict, Any, Union
import redis
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class RedisConnectionError(Exception):
    """Raised when Redis connection fails."""
    pass


class RedisService:
    """
    Redis service with the redis-py client.

    Provides fixed-window counters for rate limiting and general caching
    operations.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize the Redis service.

        Args:
            redis_url: Redis connection URL (redis://host:port)
            client: Pre-built client, used instead of connecting to redis_url
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")

        if client is not None:
            self.client = client
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2
            )
            self._test_connection()
            logger.info(f"Redis service initialized successfully at {self.redis_url}")

        except Exception as e:
            logger.error(f"Failed to initialize Redis service: {str(e)}")
            self.client = None

    def _test_connection(self) -> None:
        """Test Redis connection."""
        try:
            if not self.client.ping():
                raise RedisConnectionError("Redis ping failed")
        except redis.RedisError as e:
            logger.error(f"Redis connection test failed: {str(e)}")
            raise RedisConnectionError(f"Redis connection failed: {str(e)}")

    def is_available(self) -> bool:
        """Check if Redis service is available."""
        return self.client is not None

    def _handle_redis_error(self, operation: str, error: Exception) -> None:
        """Handle Redis operation errors with logging."""
        logger.error(f"Redis {operation} failed: {str(error)}")

    def set_with_ttl(self, key: str, value: Union[str, Dict, List], ttl_seconds: int) -> bool:
        """
        Set a key-value pair with TTL.

        Args:
            key: Redis key
            value: Value to store (will be JSON serialized if not string)
            ttl_seconds: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        if not self.is_available():
            return False

        with tracer.start_as_current_span("redis.set_with_ttl") as span:
            span.set_attributes({
                "redis.operation": "set_with_ttl",
                "redis.key": key,
                "redis.ttl": ttl_seconds
            })

            try:
                if isinstance(value, (dict, list)):
                    value = json.dumps(value)

                result = self.client.setex(key, ttl_seconds, value)
                span.set_attribute("redis.result", "success")
                return bool(result)

            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                self._handle_redis_error("SET", e)
                return False

    def get(self, key: str) -> Optional[str]:
        """
        Get value by key.

        Args:
            key: Redis key

        Returns:
            Value as string or None if not found
        """
        if not self.is_available():
            return None

        with tracer.start_as_current_span("redis.get") as span:
            span.set_attributes({
                "redis.operation": "get",
                "redis.key": key
            })

            try:
                result = self.client.get(key)
                span.set_attribute("redis.result", "hit" if result else "miss")
                return result

            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                self._handle_redis_error("GET", e)
                return None

    def delete(self, key: str) -> bool:
        if not self.is_available():
            return False
        try:
            return bool(self.client.delete(key))
        except redis.RedisError as e:
            self._handle_redis_error("DELETE", e)
            return False

    def increment_with_ttl(self, key: str, ttl_seconds: int) -> Optional[int]:
        """
        Increment a counter and refresh its expiry.

        Args:
            key: Counter key
            ttl_seconds: Counter expiry in seconds

        Returns:
            The counter value after incrementing, or None when Redis is unavailable
        """
        if not self.is_available():
            return None

        with tracer.start_as_current_span("redis.increment_with_ttl") as span:
            span.set_attributes({
                "redis.operation": "increment_with_ttl",
                "redis.key": key,
                "redis.ttl": ttl_seconds
            })

            try:
                pipeline = self.client.pipeline()
                pipeline.incr(key)
                pipeline.expire(key, ttl_seconds)
                count, _ = pipeline.execute()
                span.set_attribute("redis.result", "success")
                return int(count)

            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                self._handle_redis_error("INCR", e)
                return None

    def ping(self) -> bool:
        """
        Ping Redis server.

        Returns:
            True if ping successful, False otherwise
        """
        if not self.is_available():
            return False

        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis ping failed: {str(e)}")
            return False

    def health_check(self) -> Dict[str, Any]:
        """
        Perform Redis health check.

        Returns:
            Health check results
        """
        if not self.is_available():
            return {
                "status": "unavailable",
                "message": "Redis client not initialized",
                "timestamp": time.time()
            }

        start_time = time.time()
        healthy = self.ping()
        response_time = (time.time() - start_time) * 1000  # ms

        if healthy:
            return {
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
                "timestamp": time.time()
            }
        return {
            "status": "unhealthy",
            "message": "Redis ping failed",
            "response_time_ms": round(response_time, 2),
            "timestamp": time.time()
        }
