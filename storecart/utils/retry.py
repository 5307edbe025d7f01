# storecart/utils/retry.py
from tenacity import (
    retry,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    retry_if_exception_type,
    retry_if_result,
)
import requests
import redis

from storecart.utils.settings import CART_LOCK_WAIT_SECONDS


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_wait(max_wait: float | None = None):
    #keeps polling while the lock call returns False, gives back the last result
    return retry(
        stop=stop_after_delay(CART_LOCK_WAIT_SECONDS if max_wait is None else max_wait),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_result(lambda acquired: acquired is False),
        retry_error_callback=lambda state: state.outcome.result(),
    )
