"""
One-time password storage with explicit TTL expiry.

The auth service depends on the ``OTPStore`` interface only; the backend is
chosen from settings (in-process memory for a single worker, Redis when
several workers must share codes).
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

import redis

from payroll_app.core.config import settings
from payroll_app.core.exceptions import RedisConnectionError

logger = logging.getLogger(__name__)


class OTPStore:
    """Key-value store for short-lived verification codes."""

    def put(self, key: str, code: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    def get(self, key: str) -> Optional[str]:
        """Return the stored code, or None when absent or expired."""
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryOTPStore(OTPStore):
    """Thread-safe in-process store; expired codes are dropped on read and on every put."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, code: str, ttl_seconds: int) -> None:
        now = self._clock()
        with self._lock:
            self._drop_expired(now)
            self._entries[key] = (code, now + ttl_seconds)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            code, expires_at = entry
            if self._clock() > expires_at:
                del self._entries[key]
                return None
            return code

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            return self._drop_expired(now)

    def _drop_expired(self, now: float) -> int:
        # Caller holds the lock
        expired = [k for k, (_, expires_at) in self._entries.items() if now > expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)


class RedisOTPStore(OTPStore):
    """Redis-backed store; expiry is delegated to SETEX."""

    key_prefix = "otp:"

    def __init__(self, redis_url: str = None, password: Optional[str] = None, client=None):
        if client is not None:
            self.redis_client = client
            return

        try:
            self.redis_client = redis.from_url(
                redis_url or settings.redis_url,
                password=password or settings.redis_password,
                decode_responses=True,
                socket_timeout=settings.redis_socket_timeout,
                socket_connect_timeout=settings.redis_socket_timeout
            )
            self.redis_client.ping()
            logger.info("Redis connection established for OTP store")
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {str(e)}")
            raise RedisConnectionError(error_data={"original_error": str(e)})

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def put(self, key: str, code: str, ttl_seconds: int) -> None:
        self.redis_client.setex(self._key(key), ttl_seconds, code)

    def get(self, key: str) -> Optional[str]:
        value = self.redis_client.get(self._key(key))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def delete(self, key: str) -> None:
        self.redis_client.delete(self._key(key))


_otp_store: Optional[OTPStore] = None


def get_otp_store() -> OTPStore:
    """FastAPI dependency returning the process-wide OTP store."""
    global _otp_store
    if _otp_store is None:
        if settings.otp_backend == "redis":
            _otp_store = RedisOTPStore()
        else:
            _otp_store = InMemoryOTPStore()
    return _otp_store
