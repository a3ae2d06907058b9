from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from affinity.catalog.snapshot import CatalogSnapshot
from affinity.personalization.composer import ContentComposer
from affinity.personalization.insights import InsightsAccessor
from affinity.personalization.models import (
    PageViewEvent,
    PersonalizationInsights,
    PersonalizationTrigger,
    PersonalizedContent,
    Recommendation,
    RecommendationContext,
)
from affinity.personalization.store import KeyValueStore
from affinity.personalization.tracker import AffinityTracker
from affinity.personalization.trigger import ACTIVATION_THRESHOLD, CONFIDENCE_SATURATION, TriggerEvaluator


@dataclass(frozen=True)
class EngineConfig:
    threshold: int = ACTIVATION_THRESHOLD
    confidence_saturation: float = CONFIDENCE_SATURATION
    write_retries: int = 1
    page_view_history_max: int = 50


class PersonalizationEngine:
    """
    单用户会话的个性化引擎

    显式构造、依赖注入（目录快照 + 键值存储），不使用进程级单例。
    like/unlike 之后立即重新评估触发器；evaluate_trigger/compose/insights/recommendations
    都是基于内存状态的同步纯计算。
    """

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        store: KeyValueStore,
        *,
        storage_key: str,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._cfg = config or EngineConfig()
        self._snapshot = snapshot
        self._tracker = AffinityTracker(store, storage_key, write_retries=self._cfg.write_retries)
        self._evaluator = TriggerEvaluator(
            snapshot,
            threshold=self._cfg.threshold,
            confidence_saturation=self._cfg.confidence_saturation,
        )
        self._composer = ContentComposer(snapshot, self._evaluator, clock=clock)
        self._insights = InsightsAccessor(snapshot)
        self._page_views: deque[PageViewEvent] = deque(maxlen=max(1, self._cfg.page_view_history_max))

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    async def load(self) -> None:
        await self._tracker.load()

    async def like(self, product_id: str) -> Optional[PersonalizationTrigger]:
        record = self._snapshot.product(product_id)
        if record is None:
            logger.debug(f"喜欢的商品不在目录中: product_id='{product_id}'")
        await self._tracker.like(product_id)
        return self._recheck("like", product_id)

    async def unlike(self, product_id: str) -> Optional[PersonalizationTrigger]:
        await self._tracker.unlike(product_id)
        return self._recheck("unlike", product_id)

    def liked_ids(self) -> list[str]:
        return self._tracker.liked_ids()

    def evaluate_trigger(self) -> Optional[PersonalizationTrigger]:
        return self._evaluator.evaluate(self._tracker.liked_ids())

    def compose(self) -> Optional[PersonalizedContent]:
        return self._composer.compose(self._tracker.liked_ids())

    def insights(self) -> PersonalizationInsights:
        return self._insights.insights(self._tracker.liked_ids())

    def recommendations(self, context: RecommendationContext) -> list[Recommendation]:
        return self._composer.recommend(context, self._tracker.liked_ids())

    async def track_page_view(self, event: PageViewEvent) -> None:
        self._page_views.append(event)
        logger.debug(
            f"页面浏览: page={event.page.value}, collection_id={event.collection_id}, product_id={event.product_id}"
        )

    def recent_page_views(self) -> list[PageViewEvent]:
        return list(self._page_views)

    async def flush(self) -> None:
        await self._tracker.flush()

    def _recheck(self, action: str, product_id: str) -> Optional[PersonalizationTrigger]:
        trigger = self.evaluate_trigger()
        if trigger is not None:
            logger.info(
                f"个性化已触发: action={action}, product_id='{product_id}', "
                f"collection='{trigger.collection_name}', likes={trigger.like_count}"
            )
        else:
            logger.debug(f"个性化未触发: action={action}, product_id='{product_id}', total={len(self._tracker)}")
        return trigger
