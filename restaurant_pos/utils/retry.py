# restaurant_pos/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import redis


def redis_retry(attempts: int = 3, max_wait: float = 2):
    """Retry transient Redis failures (cart store), then re-raise the last one."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=max_wait),
        retry=retry_if_exception_type(redis.RedisError),
    )
