import time
import uuid

import redis
from django.conf import settings

# Only the holder of the token may extend or drop the key.
_RENEW = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('pexpire', KEYS[1], ARGV[2])
end
return 0
"""

_RELEASE = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


def get_redis():
    return redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)


class LockLost(RuntimeError):
    pass


class RedisKeeperLock:
    """
    Single-instance lock for the round keeper.
    acquire: SET NX PX, renew/release: token-checked scripts.
    """

    def __init__(self, key: str, ttl_seconds: float, client=None):
        self.key = key
        self.ttl_ms = int(ttl_seconds * 1000)
        self.token = uuid.uuid4().hex
        self.r = client or get_redis()
        self._renew = self.r.register_script(_RENEW)
        self._release = self.r.register_script(_RELEASE)

    def acquire(self) -> bool:
        return bool(self.r.set(self.key, self.token, nx=True, px=self.ttl_ms))

    def renew(self) -> bool:
        return bool(self._renew(keys=[self.key], args=[self.token, self.ttl_ms]))

    def release(self) -> bool:
        return bool(self._release(keys=[self.key], args=[self.token]))


class LockHeartbeat:
    def __init__(self, lock: RedisKeeperLock, every_seconds: float = 5.0):
        self.lock = lock
        self.every = every_seconds
        self._next = time.monotonic() + self.every

    def tick(self):
        now = time.monotonic()
        if now >= self._next:
            if not self.lock.renew():
                raise LockLost(f"Lost keeper lock {self.lock.key}")
            self._next = now + self.every
