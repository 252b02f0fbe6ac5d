"""
Key/Value Store - preference and session identity persistence.

Provides:
- Redis-backed get/set/remove with per-store key prefix and TTL
- Graceful fallback to an in-memory dict when Redis is disabled or down
- Singletons for the two stores the session manager uses

Key patterns:
    chatdesk:pref:{key}      (preference store, no TTL)
    chatdesk:identity:{key}  (session identity store, TTL = session_ttl)

Usage:
    from services.kv_store import get_preference_store

    prefs = await get_preference_store()
    await prefs.set("use_mock_responses", "true")
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import redis.asyncio as redis_async

logger = logging.getLogger(__name__)

PREFERENCE_PREFIX = "chatdesk:pref:"
IDENTITY_PREFIX = "chatdesk:identity:"


@dataclass
class KeyValueStore:
    """
    String key/value store with fallback support.

    Connects lazily on first use. Any Redis failure switches the store
    to in-memory mode for the rest of its life.
    """

    url: str = "redis://localhost:6379/0"
    enabled: bool = True
    prefix: str = ""
    ttl: Optional[int] = None

    # Connection state
    _client: Any = field(default=None, repr=False)
    _fallback_mode: bool = field(default=False, repr=False)
    _local: Dict[str, str] = field(default_factory=dict, repr=False)
    _local_expiry: Dict[str, float] = field(default_factory=dict, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    _initialized: bool = field(default=False, repr=False)

    @property
    def fallback_mode(self) -> bool:
        """Check if operating in fallback mode."""
        return self._fallback_mode

    async def connect(self) -> bool:
        """
        Establish Redis connection.

        Returns:
            True if connected, False if fallback mode activated
        """
        async with self._lock:
            if self._initialized:
                return not self._fallback_mode

            if not self.enabled:
                logger.debug(f"Store {self.prefix or '<root>'} using in-memory mode")
                self._fallback_mode = True
                self._initialized = True
                return False

            try:
                self._client = redis_async.from_url(
                    self.url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=5.0,
                    socket_timeout=5.0,
                )
                await self._client.ping()
                self._fallback_mode = False
                self._initialized = True
                logger.info(f"Redis connected: {self.url}")
                return True
            except Exception as e:
                logger.warning(f"Redis connection failed: {e}, using fallback mode")
                self._fallback_mode = True
                self._initialized = True
                return False

    async def disconnect(self) -> None:
        """Close Redis connection."""
        async with self._lock:
            if self._client:
                try:
                    await self._client.close()
                except Exception as e:
                    logger.warning(f"Error closing Redis: {e}")
                finally:
                    self._client = None

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def _ready(self) -> None:
        if not self._initialized:
            await self.connect()

    # === Key-Value Operations ===

    async def get(self, key: str) -> Optional[str]:
        """Get a value by key, or None."""
        await self._ready()
        if self._fallback_mode:
            return self._fallback_get(key)

        try:
            return await self._client.get(self._make_key(key))
        except Exception as e:
            logger.warning(f"Redis GET failed for {key}: {e}")
            self._enter_fallback()
            return self._fallback_get(key)

    async def set(self, key: str, value: str) -> bool:
        """Set a value, applying the store TTL if one is configured."""
        await self._ready()
        value = str(value)
        if self._fallback_mode:
            self._fallback_set(key, value)
            return True

        try:
            if self.ttl:
                await self._client.setex(self._make_key(key), self.ttl, value)
            else:
                await self._client.set(self._make_key(key), value)
            return True
        except Exception as e:
            logger.warning(f"Redis SET failed for {key}: {e}")
            self._enter_fallback()
            self._fallback_set(key, value)
            return True

    async def remove(self, key: str) -> bool:
        """Delete a key. Removing a missing key is not an error."""
        await self._ready()
        if self._fallback_mode:
            self._local.pop(key, None)
            self._local_expiry.pop(key, None)
            return True

        try:
            await self._client.delete(self._make_key(key))
            return True
        except Exception as e:
            logger.warning(f"Redis DELETE failed for {key}: {e}")
            self._enter_fallback()
            self._local.pop(key, None)
            self._local_expiry.pop(key, None)
            return True

    # === Internal ===

    def _fallback_get(self, key: str) -> Optional[str]:
        expiry = self._local_expiry.get(key)
        if expiry is not None and time.time() > expiry:
            self._local.pop(key, None)
            self._local_expiry.pop(key, None)
            return None
        return self._local.get(key)

    def _fallback_set(self, key: str, value: str) -> None:
        self._local[key] = value
        if self.ttl:
            self._local_expiry[key] = time.time() + self.ttl
        else:
            self._local_expiry.pop(key, None)

    def _enter_fallback(self) -> None:
        """Switch to fallback mode."""
        if not self._fallback_mode:
            logger.warning("Redis unavailable, switching to fallback mode")
            self._fallback_mode = True


# Singleton instances
_preference_store: Optional[KeyValueStore] = None
_identity_store: Optional[KeyValueStore] = None


async def get_preference_store() -> KeyValueStore:
    """Get the durable preference store (simulated-mode flag)."""
    global _preference_store
    if _preference_store is None:
        from config import runtime_config

        _preference_store = KeyValueStore(
            url=runtime_config.redis_url,
            enabled=runtime_config.redis_enabled,
            prefix=PREFERENCE_PREFIX,
        )
        await _preference_store.connect()
    return _preference_store


async def get_identity_store() -> KeyValueStore:
    """Get the session identity store (expires with the session)."""
    global _identity_store
    if _identity_store is None:
        from config import runtime_config

        _identity_store = KeyValueStore(
            url=runtime_config.redis_url,
            enabled=runtime_config.redis_enabled,
            prefix=IDENTITY_PREFIX,
            ttl=runtime_config.session_ttl,
        )
        await _identity_store.connect()
    return _identity_store


async def close_stores() -> None:
    """Close both store connections (call on shutdown)."""
    global _preference_store, _identity_store
    for store in (_preference_store, _identity_store):
        if store:
            await store.disconnect()
    _preference_store = None
    _identity_store = None
