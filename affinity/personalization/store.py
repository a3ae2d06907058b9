from __future__ import annotations

from typing import Any, Optional, Protocol


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class _RedisLike(Protocol):
    @property
    def client(self) -> Any: ...


class RedisKeyValueStore:
    """以 Redis String 实现的键值存储（值为 JSON 文本）"""

    def __init__(self, redis_client: _RedisLike):
        self._redis_client = redis_client

    async def get(self, key: str) -> Optional[str]:
        value = await self._redis_client.client.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    async def set(self, key: str, value: str) -> None:
        await self._redis_client.client.set(key, value)
