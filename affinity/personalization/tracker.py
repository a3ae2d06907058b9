from __future__ import annotations

import json

from loguru import logger

from affinity.personalization.persistence import SerializedWriter
from affinity.personalization.store import KeyValueStore


class AffinityTracker:
    """
    喜欢列表（商品ID集合）

    内存状态是当前会话的唯一事实来源：like/unlike 先改内存，再把完整集合
    交给单写者队列异步落盘（失败只记日志，不影响调用方）。
    """

    def __init__(self, store: KeyValueStore, key: str, *, write_retries: int = 1):
        self._store = store
        self._key = key
        # dict 保持插入顺序，值无意义
        self._liked: dict[str, None] = {}
        self._writer = SerializedWriter(store, key, retries=write_retries)

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> None:
        """读取失败或数据损坏时从空集合开始，不向调用方抛错"""
        try:
            raw = await self._store.get(self._key)
        except Exception as exc:
            logger.warning(f"读取喜欢列表失败，使用空集合: key='{self._key}', err={exc}")
            self._liked = {}
            return

        if raw is None:
            self._liked = {}
            return

        ids = _decode_ids(raw)
        if ids is None:
            logger.warning(f"喜欢列表数据损坏，使用空集合: key='{self._key}'")
            self._liked = {}
            return
        self._liked = dict.fromkeys(ids)

    async def like(self, product_id: str) -> None:
        if not product_id:
            return
        self._liked[product_id] = None
        self._persist()

    async def unlike(self, product_id: str) -> None:
        if not product_id:
            return
        self._liked.pop(product_id, None)
        self._persist()

    def liked_ids(self) -> list[str]:
        return list(self._liked)

    def contains(self, product_id: str) -> bool:
        return product_id in self._liked

    def __len__(self) -> int:
        return len(self._liked)

    async def flush(self) -> None:
        await self._writer.flush()

    def _persist(self) -> None:
        self._writer.submit(json.dumps(list(self._liked), ensure_ascii=False))


def _decode_ids(raw: str | bytes) -> list[str] | None:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
        return None
    return [x for x in data if x]
