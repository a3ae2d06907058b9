"""
商品目录模块

提供目录数据模型、目录服务（JSON 种子文件）与只读快照。
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from affinity.catalog.models import CollectionRecord, ProductRecord
    from affinity.catalog.service import CatalogService, StaticCatalogService
    from affinity.catalog.snapshot import CatalogSnapshot

__all__ = [
    "CatalogService",
    "CatalogSnapshot",
    "CollectionRecord",
    "ProductRecord",
    "StaticCatalogService",
]
