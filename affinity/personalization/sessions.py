from __future__ import annotations

import asyncio
from collections import OrderedDict

from loguru import logger

from affinity.catalog.snapshot import CatalogSnapshot
from affinity.personalization.engine import EngineConfig, PersonalizationEngine
from affinity.personalization.keys import PersonalizationKeys
from affinity.personalization.store import KeyValueStore

DEFAULT_MAX_SESSIONS = 1000


class PersonalizationSessions:
    """
    按用户维护引擎实例（首次访问时创建并加载喜欢列表）

    - 缓存按最近访问做 LRU 淘汰，超过 max_sessions 时淘汰最久未访问的用户，
      淘汰前先 flush 该用户未落盘的写入；再次访问时从存储重新加载
    - 加载在锁外进行，慢读取只阻塞当前用户
    - 内存状态是唯一写回来源，仅适用于单进程部署（多 worker 共享同一用户会互相覆盖）
    """

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        store: KeyValueStore,
        *,
        keys: PersonalizationKeys | None = None,
        config: EngineConfig | None = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        if max_sessions <= 0:
            raise ValueError("max_sessions 必须 > 0")
        self._snapshot = snapshot
        self._store = store
        self._keys = keys or PersonalizationKeys()
        self._cfg = config or EngineConfig()
        self._max_sessions = int(max_sessions)
        self._engines: OrderedDict[str, PersonalizationEngine] = OrderedDict()
        self._loading: dict[str, asyncio.Future[PersonalizationEngine]] = {}

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def __len__(self) -> int:
        return len(self._engines)

    async def get(self, user_id: str) -> PersonalizationEngine:
        if not user_id:
            raise ValueError("user_id 不能为空")

        engine = self._engines.get(user_id)
        if engine is not None:
            self._engines.move_to_end(user_id)
            return engine

        # 同一用户的并发首次访问共享一次加载
        pending = self._loading.get(user_id)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future[PersonalizationEngine] = asyncio.get_running_loop().create_future()
        self._loading[user_id] = future
        try:
            engine = PersonalizationEngine(
                self._snapshot,
                self._store,
                storage_key=self._keys.liked_products_for(user_id),
                config=self._cfg,
            )
            await engine.load()
        except Exception as exc:
            future.set_exception(exc)
            # 标记已读取，没有等待者时不再告警
            future.exception()
            raise
        except BaseException:
            future.cancel()
            raise
        finally:
            self._loading.pop(user_id, None)

        self._engines[user_id] = engine
        future.set_result(engine)
        await self._evict_overflow()
        return engine

    async def close(self) -> None:
        engines = list(self._engines.values())
        self._engines.clear()
        await asyncio.gather(*(engine.flush() for engine in engines))

    async def _evict_overflow(self) -> None:
        evicted: list[tuple[str, PersonalizationEngine]] = []
        while len(self._engines) > self._max_sessions:
            evicted.append(self._engines.popitem(last=False))
        for user_id, engine in evicted:
            logger.debug(f"淘汰个性化会话: user_id='{user_id}'")
            await engine.flush()
