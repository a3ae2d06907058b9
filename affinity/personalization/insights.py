from __future__ import annotations

from typing import Iterable

from affinity.catalog.snapshot import CatalogSnapshot
from affinity.personalization.models import PersonalizationInsights, PriceSummary
from affinity.personalization.trigger import aggregate_affinities, rank_affinities


class InsightsAccessor:
    """喜欢列表的聚合统计（只读、无副作用）"""

    def __init__(self, snapshot: CatalogSnapshot):
        self._snapshot = snapshot

    def insights(self, liked_ids: Iterable[str]) -> PersonalizationInsights:
        ids = list(liked_ids)
        liked_products = [p for p in (self._snapshot.product(pid) for pid in ids) if p is not None]

        ranked = rank_affinities(aggregate_affinities(ids, self._snapshot))
        dominant_name = ranked[0][0] if ranked else None
        dominant = self._snapshot.collection_for(dominant_name) if dominant_name else None

        prices = [p.price for p in liked_products]
        materials = sorted({p.specifications.case_material for p in liked_products if p.specifications.case_material})

        return PersonalizationInsights(
            dominant_collection=dominant,
            dominant_collection_name=dominant_name,
            liked_products=liked_products,
            collection_affinities=dict(ranked),
            price_range=PriceSummary(min=min(prices), max=max(prices)) if prices else PriceSummary(),
            preferred_materials=materials,
            total_likes=len(ids),
        )
