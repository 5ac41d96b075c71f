"""
Rate Limiting Middleware

Per-client-IP rate limiting of the public share viewers using Redis.

ARCHITECTURE: token bucket algorithm with Redis. Each client IP has its own
bucket. Authenticated endpoints are not limited here.

When REDIS_URL is empty or Redis cannot be reached the limiter is disabled
and requests pass through.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import redis
import time
import logging
from saas_console.config import get_settings
from saas_console.core.exceptions import RateLimitExceeded
from saas_console.utils.logging import log_security_event

logger = logging.getLogger(__name__)
settings = get_settings()

PUBLIC_PREFIX = "/api/v1/public"


def connect_redis(url: str):
    """Return a live Redis client, or None when limiting must be disabled."""
    if not url:
        logger.warning("Rate limiting disabled - REDIS_URL not configured")
        return None
    try:
        client = redis.from_url(url, decode_responses=True, socket_connect_timeout=5)
        client.ping()
    except redis.RedisError as e:
        logger.error(f"Redis connection failed: {e}")
        logger.warning("Rate limiting disabled - Redis unavailable")
        return None
    logger.info("Redis connection established for rate limiting")
    return client


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token bucket rate limiter per client IP for public endpoints."""

    def __init__(self, app, redis_client=None, rate_limit: int = None, burst: int = None):
        super().__init__(app)
        self.redis_client = redis_client if redis_client is not None else connect_redis(settings.REDIS_URL)
        self.rate_limit = rate_limit or settings.PUBLIC_RATE_LIMIT_PER_MINUTE
        self.burst = burst or settings.RATE_LIMIT_BURST

    async def dispatch(self, request: Request, call_next):
        if self.redis_client is None or not request.url.path.startswith(PUBLIC_PREFIX):
            return await call_next(request)

        client_ip = self._get_client_identifier(request)
        allowed, retry_after = self._check_rate_limit(f"rate_limit:public:{client_ip}")

        if not allowed:
            log_security_event(
                "rate_limit_exceeded",
                {"client_ip": client_ip, "path": request.url.path},
                logger
            )
            # Middleware runs outside the exception handlers
            exc = RateLimitExceeded(retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "detail": exc.detail,
                    "type": "rate_limit_exceeded",
                    "retry_after": retry_after
                },
                headers=exc.headers
            )

        return await call_next(request)

    def _check_rate_limit(self, key: str, now: float = None) -> tuple[bool, int]:
        """
        Check if request is allowed under rate limit.

        Returns: (allowed: bool, retry_after: int)

        Uses token bucket algorithm:
        - Bucket holds max tokens (burst capacity)
        - Tokens added at fixed rate
        - Each request consumes one token
        """
        key_timestamp = f"{key}:timestamp"
        per_second = self.rate_limit / 60.0
        now = time.time() if now is None else now

        try:
            current_tokens = self.redis_client.get(key)
            last_update = self.redis_client.get(key_timestamp)

            if current_tokens is None:
                # First request - initialize bucket
                self.redis_client.setex(key, 60, self.burst - 1)
                self.redis_client.setex(key_timestamp, 60, now)
                return True, 0

            current_tokens = float(current_tokens)
            last_update = float(last_update) if last_update else now

            elapsed = now - last_update
            new_tokens = min(self.burst, current_tokens + elapsed * per_second)

            if new_tokens >= 1:
                self.redis_client.setex(key, 60, new_tokens - 1)
                self.redis_client.setex(key_timestamp, 60, now)
                return True, 0

            retry_after = int(((1 - new_tokens) / per_second) + 1)
            return False, retry_after

        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return True, 0

    @staticmethod
    def _get_client_identifier(request: Request) -> str:
        return request.client.host if request.client else "unknown"
