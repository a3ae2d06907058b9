from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Protocol

from loguru import logger

from affinity.catalog.models import CollectionRecord, ProductRecord


class CatalogService(Protocol):
    async def list_products(self) -> list[ProductRecord]: ...

    async def list_collections(self) -> list[CollectionRecord]: ...


class StaticCatalogService:
    """
    基于 JSON 文件的目录服务

    文件格式: {"collections": [...], "products": [...]}
    首次访问时读取并缓存。
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._products: list[ProductRecord] | None = None
        self._collections: list[CollectionRecord] | None = None

    async def list_products(self) -> list[ProductRecord]:
        if self._products is None:
            await self._load()
        return list(self._products or [])

    async def list_collections(self) -> list[CollectionRecord]:
        if self._collections is None:
            await self._load()
        return list(self._collections or [])

    async def _load(self) -> None:
        # 在线程池中读取文件
        text = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        raw = json.loads(text)
        self._collections = [CollectionRecord.model_validate(c) for c in raw.get("collections") or []]
        self._products = [ProductRecord.model_validate(p) for p in raw.get("products") or []]
        logger.info(
            f"目录加载完成: path={self._path}, collections={len(self._collections)}, products={len(self._products)}"
        )
