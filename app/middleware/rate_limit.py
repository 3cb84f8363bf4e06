from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, Response
import redis
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Redis connection for rate limiting
redis_client = None
if settings.RATE_LIMIT_ENABLED:
    try:
        redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            decode_responses=True,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        # Test connection
        redis_client.ping()
        logger.info(f"Rate limiting Redis connected: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    except Exception as e:
        logger.warning(f"Rate limiting Redis connection failed: {e}. Using in-memory fallback.")
        redis_client = None
else:
    logger.info("Rate limiting disabled")


def get_user_id_or_ip(request: Request):
    """
    Get user ID from the authenticated request or fall back to IP address.
    This provides better rate limiting for authenticated users.
    """
    # Set by get_current_user once the caller is known
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    # Fall back to IP address
    return f"ip:{get_remote_address(request)}"


# Create limiter instance
limiter = Limiter(
    key_func=get_user_id_or_ip,
    storage_uri=f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}" if redis_client else "memory://",
    default_limits=["1000/hour"],  # Global default limit
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Rate limiting configurations for different endpoints
RATE_LIMITS = {
    # Streak lifecycle and ledger writes
    "api_write": "100/hour",
    "api_read": "200/hour",

    # LLM-backed motivational text
    "motivation": "30/hour",

    # Unauthenticated public profile reads
    "public": "120/minute",
}


def get_rate_limit_for_endpoint(endpoint: str) -> str:
    """Get rate limit configuration for specific endpoint."""
    return RATE_LIMITS.get(endpoint, "100/hour")


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom rate limit exceeded handler with helpful error messages.
    """
    response = Response(
        content=f"Rate limit exceeded: {exc.detail}. Please try again later.",
        status_code=429,
        headers={"Retry-After": "60"}
    )
    return response


# Rate limiting decorators for different endpoint types
def rate_limit_api_read(func):
    """Rate limit for read API endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("api_read"))(func)


def rate_limit_api_write(func):
    """Rate limit for write API endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("api_write"))(func)


def rate_limit_motivation(func):
    """Rate limit for the motivational text endpoint."""
    return limiter.limit(get_rate_limit_for_endpoint("motivation"))(func)


def rate_limit_public(func):
    """Rate limit for unauthenticated public endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("public"))(func)
