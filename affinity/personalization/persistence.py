from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from affinity.personalization.store import KeyValueStore


class SerializedWriter:
    """
    单 Key 单写者队列

    - submit() 只登记最新快照并确保后台写任务在跑，不等待 I/O
    - 后台任务按提交顺序写入；积压时只写最新的一份，旧快照不会覆盖新快照
    - 每次写入失败最多重试 retries 次，最终失败记录日志后丢弃
    """

    def __init__(self, store: KeyValueStore, key: str, *, retries: int = 1):
        self._store = store
        self._key = key
        self._retries = max(0, int(retries))
        self._pending: Optional[str] = None
        self._task: Optional[asyncio.Task] = None
        self._failed_writes = 0

    @property
    def key(self) -> str:
        return self._key

    @property
    def failed_writes(self) -> int:
        return self._failed_writes

    def submit(self, payload: str) -> None:
        self._pending = payload
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def flush(self) -> None:
        while self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    async def _drain(self) -> None:
        while self._pending is not None:
            payload = self._pending
            self._pending = None
            await self._write_with_retry(payload)

    async def _write_with_retry(self, payload: str) -> None:
        attempts = self._retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await self._store.set(self._key, payload)
                return
            except Exception as exc:
                if attempt < attempts:
                    logger.warning(f"喜欢列表写入失败，准备重试: key='{self._key}', attempt={attempt}, err={exc}")
                    continue
                self._failed_writes += 1
                logger.error(f"喜欢列表写入最终失败，保留内存状态: key='{self._key}', err={exc}")
