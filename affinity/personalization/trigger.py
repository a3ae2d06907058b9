from __future__ import annotations

from typing import Iterable, Optional

from loguru import logger

from affinity.catalog.snapshot import CatalogSnapshot
from affinity.personalization.models import PersonalizationTrigger, TriggerType
from affinity.personalization.normalization import (
    collection_priority,
    infer_collection_from_product_id,
    normalize_collection,
)

ACTIVATION_THRESHOLD = 4
CONFIDENCE_SATURATION = 6.0


def aggregate_affinities(liked_ids: Iterable[str], snapshot: CatalogSnapshot) -> dict[str, int]:
    """
    按规范系列统计喜欢数

    - 目录命中：规范化商品的原始系列名
    - 目录未命中：对商品ID做子串推断
    - 两者都失败：不计入任何系列（仍计入总喜欢数，由调用方负责）
    """
    counts: dict[str, int] = {}
    for product_id in liked_ids:
        record = snapshot.product(product_id)
        if record is not None:
            name: Optional[str] = normalize_collection(record.collection)
        else:
            name = infer_collection_from_product_id(product_id)
        if not name:
            continue
        counts[name] = counts.get(name, 0) + 1
    return counts


def rank_affinities(counts: dict[str, int]) -> list[tuple[str, int]]:
    """确定性排序：喜欢数降序 -> 固定系列优先级 -> 名称字典序"""
    return sorted(counts.items(), key=lambda x: (-x[1], *collection_priority(x[0])))


class TriggerEvaluator:
    def __init__(
        self,
        snapshot: CatalogSnapshot,
        *,
        threshold: int = ACTIVATION_THRESHOLD,
        confidence_saturation: float = CONFIDENCE_SATURATION,
    ):
        if threshold <= 0:
            raise ValueError("threshold 必须 > 0")
        if confidence_saturation <= 0:
            raise ValueError("confidence_saturation 必须 > 0")
        self._snapshot = snapshot
        self._threshold = int(threshold)
        self._saturation = float(confidence_saturation)

    @property
    def threshold(self) -> int:
        return self._threshold

    def evaluate(self, liked_ids: Iterable[str]) -> Optional[PersonalizationTrigger]:
        counts = aggregate_affinities(liked_ids, self._snapshot)
        for name, count in rank_affinities(counts):
            if count < self._threshold:
                # 已按数量降序，后面不会再有达标的系列
                break
            return PersonalizationTrigger(
                type=TriggerType.COLLECTION_AFFINITY,
                collection_id=self._resolve_collection_id(name),
                collection_name=name,
                like_count=count,
                confidence=self.confidence_for(count),
                reasoning=f"Strong affinity detected for {name} collection",
            )
        logger.debug(f"未触发个性化: affinities={counts}, threshold={self._threshold}")
        return None

    def confidence_for(self, count: int) -> float:
        return min(count / self._saturation, 1.0)

    def _resolve_collection_id(self, name: str) -> str:
        record = self._snapshot.collection(name)
        if record is not None:
            return record.id
        return name.lower()
