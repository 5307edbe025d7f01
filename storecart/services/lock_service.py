# storecart/services/lock_service.py
import uuid
from contextlib import contextmanager

import redis

from storecart.domain.actor import CartOwner
from storecart.domain.errors import ConflictError
from storecart.utils.retry import redis_retry, lock_wait
from storecart.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS
from storecart.utils.logging import get_logger

logger = get_logger(__name__)

#LUA compare and delete, atomic
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis runs the script as one uninterruptible operation,
#nobody can get between GET and DEL so we never drop a lock that someone else took over


def cart_lock_key(store_id: int, owner: CartOwner) -> str:
    return f"cart:{store_id}:{owner.kind}:{owner.key}:lock"


class LockService:
    """
    -per (store, owner) lock around read-or-create-then-merge
    -release only by the token that acquired it
    -lock expires on its own if the holder dies
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, key: str, token: str, ttl: int = CART_LOCK_TTL_SECONDS) -> bool:
        logger.debug(f"Acquire lock {key}")
        #SET cart:1:session:...:lock "<token>" NX EX 10
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        logger.debug(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @lock_wait()
    def _wait_for(self, key: str, token: str) -> bool:
        return self.acquire(key, token)

    @contextmanager
    def cart_lock(self, store_id: int, owner: CartOwner):
        key = cart_lock_key(store_id, owner)
        token = uuid.uuid4().hex

        if not self._wait_for(key, token):
            logger.warning(f"Could not acquire {key}, cart busy")
            raise ConflictError("Cart is being modified by another request, try again")

        try:
            yield
        finally:
            self.release(key, token)
