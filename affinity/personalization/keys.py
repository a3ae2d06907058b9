from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PersonalizationKeys:
    """
    个性化模块存储 Key 集合（可选前缀用于环境隔离）。
    """

    liked_products: str = "breitling_liked_products"

    @classmethod
    def with_prefix(cls, prefix: str) -> "PersonalizationKeys":
        p = prefix or ""
        return cls(liked_products=f"{p}breitling_liked_products")

    def liked_products_for(self, user_id: str) -> str:
        if not user_id:
            return self.liked_products
        return f"{self.liked_products}:{user_id}"
