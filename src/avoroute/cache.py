"""Best-effort key-value cache with Redis support and in-memory fallback.

Every operation swallows backend errors after logging them: a cache miss
or an unreachable Redis must never fail a sourcing request.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class CacheKeys:
    """Key builders for cached wallet data."""

    @staticmethod
    def avocado_address(eoa_address: str, index: str) -> str:
        return f"AVOCADO_ADDRESS:{eoa_address}:{index}"

    @staticmethod
    def required_signers(chain_id: int, wallet_address: str) -> str:
        return f"REQ_SIGNERS:{int(chain_id)}:{wallet_address}"

    @staticmethod
    def wallet_nonce(chain_id: int, wallet_address: str) -> str:
        return f"WALLET_NONCE:{int(chain_id)}:{wallet_address}"


class CacheBackend(ABC):
    """Abstract cache backend interface."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get a value from cache, None on miss or error."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Set a value with optional TTL in seconds. Returns False on error."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key from cache."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None


class InMemoryCache(CacheBackend):
    """Process-local cache for development and tests."""

    def __init__(self):
        self._store: dict[str, tuple[str, Optional[float]]] = {}  # key -> (value, expires_at)

    async def get(self, key: str) -> Optional[str]:
        if key not in self._store:
            return None
        value, expires_at = self._store[key]
        if expires_at and time.time() > expires_at:
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        expires_at = time.time() + ttl if ttl else None
        self._store[key] = (value, expires_at)
        return True

    async def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None


class RedisCache(CacheBackend):
    """Redis cache backend."""

    def __init__(self, url: str):
        self._url = url
        self._client = None

    async def _get_client(self):
        """Lazy initialization of Redis client."""
        if self._client is None:
            import redis.asyncio as redis

            self._client = redis.from_url(self._url, decode_responses=True)
            logger.info("[Redis] Client connected")
        return self._client

    async def get(self, key: str) -> Optional[str]:
        try:
            client = await self._get_client()
            return await client.get(key)
        except Exception as e:
            logger.error(f"[Redis] get error for {key}: {e}")
            return None

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        try:
            client = await self._get_client()
            if ttl:
                await client.setex(key, ttl, value)
            else:
                await client.set(key, value)
            logger.debug(f"[Redis] Saved {key} to cache")
            return True
        except Exception as e:
            logger.error(f"[Redis] set error for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            client = await self._get_client()
            return await client.delete(key) > 0
        except Exception as e:
            logger.error(f"[Redis] delete error for {key}: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


def create_cache(redis_url: Optional[str] = None) -> CacheBackend:
    """Create a cache with the appropriate backend."""
    if redis_url:
        logger.info("Using Redis cache backend")
        return RedisCache(redis_url)
    logger.info("Using in-memory cache backend")
    return InMemoryCache()
