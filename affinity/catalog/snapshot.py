from __future__ import annotations

from typing import Iterable, Optional

from loguru import logger

from affinity.catalog.models import CollectionRecord, ProductRecord
from affinity.catalog.service import CatalogService
from affinity.personalization.normalization import normalize_collection


class CatalogSnapshot:
    """
    目录只读快照

    构建时一次性建立查找表（商品ID、系列ID、系列名、规范系列名），
    调用期不再做全量字符串扫描。空快照合法，所有查询退化为 None / 空列表。
    """

    def __init__(self, products: Iterable[ProductRecord], collections: Iterable[CollectionRecord]):
        self._products: tuple[ProductRecord, ...] = tuple(products)
        self._collections: tuple[CollectionRecord, ...] = tuple(collections)

        self._product_by_id: dict[str, ProductRecord] = {}
        for product in self._products:
            self._product_by_id.setdefault(product.id, product)

        self._collection_by_id: dict[str, CollectionRecord] = {}
        self._collection_by_name: dict[str, CollectionRecord] = {}
        self._collection_by_canonical: dict[str, CollectionRecord] = {}
        for collection in self._collections:
            self._collection_by_id.setdefault(collection.id, collection)
            self._collection_by_name.setdefault(collection.name.casefold(), collection)
            self._collection_by_canonical.setdefault(normalize_collection(collection.name), collection)

    @classmethod
    def empty(cls) -> "CatalogSnapshot":
        return cls((), ())

    @classmethod
    async def load(cls, service: CatalogService) -> "CatalogSnapshot":
        """从目录服务拉取数据；服务不可用时返回空快照"""
        try:
            products = await service.list_products()
            collections = await service.list_collections()
        except Exception as exc:
            logger.error(f"目录服务不可用，使用空快照: {exc}")
            return cls.empty()
        return cls(products, collections)

    @property
    def products(self) -> tuple[ProductRecord, ...]:
        return self._products

    @property
    def collections(self) -> tuple[CollectionRecord, ...]:
        return self._collections

    def is_empty(self) -> bool:
        return not self._products and not self._collections

    def product(self, product_id: str) -> Optional[ProductRecord]:
        return self._product_by_id.get(product_id)

    def collection(self, id_or_name: str) -> Optional[CollectionRecord]:
        """先按系列ID，再按系列名（忽略大小写）查找"""
        if not id_or_name:
            return None
        found = self._collection_by_id.get(id_or_name)
        if found is not None:
            return found
        return self._collection_by_name.get(id_or_name.casefold())

    def collection_for(self, canonical_name: str) -> Optional[CollectionRecord]:
        return self._collection_by_canonical.get(canonical_name)

    def products_in_collection(self, label: str) -> list[ProductRecord]:
        """原始系列名精确匹配（忽略大小写），保持目录顺序"""
        key = (label or "").casefold()
        return [p for p in self._products if p.collection.casefold() == key]

    def products_matching_collection(self, fragment: str) -> list[ProductRecord]:
        """原始系列名包含 fragment（忽略大小写），保持目录顺序"""
        key = (fragment or "").casefold()
        if not key:
            return []
        return [p for p in self._products if key in p.collection.casefold()]
