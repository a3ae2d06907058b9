from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from loguru import logger

from affinity.catalog.models import CollectionRecord
from affinity.catalog.snapshot import CatalogSnapshot
from affinity.personalization.models import (
    Action,
    ActionType,
    CollectionBrowsing,
    Insight,
    InsightCategory,
    PersonalizationMetadata,
    PersonalizationModal,
    PersonalizationTrigger,
    PersonalizedContent,
    ProductViewing,
    Recommendation,
    RecommendationContext,
    RecommendationType,
)
from affinity.personalization.normalization import CanonicalCollection
from affinity.personalization.templates import CROSS_COLLECTION_RULES, NARRATIVE_TEMPLATES
from affinity.personalization.trigger import TriggerEvaluator

INTRA_COLLECTION_LIMIT = 2
INTRA_COLLECTION_CONFIDENCE = 0.9
CROSS_COLLECTION_PRIORITY = 3
BROWSING_CONFIDENCE = 0.8
SIMILAR_PRODUCT_CONFIDENCE = 0.87
DEFAULT_ESTABLISHED_YEAR = 1884


class ContentComposer:
    """
    个性化内容组装

    触发器 -> 系列数据 -> 洞察 / 推荐 / 行动项 -> PersonalizedContent。
    纯计算，不读写存储；推荐结果永远不包含已喜欢的商品。
    """

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        evaluator: TriggerEvaluator,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._snapshot = snapshot
        self._evaluator = evaluator
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def compose(self, liked_ids: Iterable[str]) -> Optional[PersonalizedContent]:
        liked = list(liked_ids)
        trigger = self._evaluator.evaluate(liked)
        if trigger is None:
            return None

        collection = self._snapshot.collection(trigger.collection_id)
        if collection is None:
            # 没有系列数据的触发器无法展示
            logger.warning(
                f"触发系列缺少目录数据，跳过内容组装: collection_id='{trigger.collection_id}'"
            )
            return None

        return PersonalizedContent(
            trigger=trigger,
            collection=collection,
            insights=self.build_insights(trigger, collection),
            recommendations=self.recommend_for_trigger(trigger, liked),
            actions=self.build_actions(trigger, collection),
            metadata=PersonalizationMetadata(generated_at=self._clock()),
        )

    # ========================================
    # 洞察
    # ========================================
    def build_insights(self, trigger: PersonalizationTrigger, collection: CollectionRecord) -> list[Insight]:
        slug = _slug(collection.name)
        confidence = trigger.confidence

        insights: list[Insight] = [
            Insight(
                id=f"{slug}-heritage-appreciation",
                title="Heritage Connoisseur",
                description=(
                    f"{collection.heritage}. Your appreciation for the {collection.name} reveals a refined "
                    "understanding of this distinguished legacy."
                ),
                image_url=collection.hero_image_url,
                collection_id=collection.id,
                category=InsightCategory.HERITAGE,
                confidence=confidence,
            )
        ]

        if collection.key_features:
            features = " and ".join(collection.key_features[:2])
            insights.append(
                Insight(
                    id=f"{slug}-technical-mastery",
                    title="Technical Sophistication",
                    description=(
                        f"Your selection demonstrates appreciation for {features}. These signature elements "
                        "represent the pinnacle of Swiss horological engineering."
                    ),
                    image_url=collection.image_url,
                    collection_id=collection.id,
                    category=InsightCategory.TECHNICAL,
                    confidence=confidence,
                )
            )

        canonical = CanonicalCollection.from_label(collection.name)
        template = NARRATIVE_TEMPLATES.get(canonical) if canonical is not None else None
        if template is not None:
            insights.append(
                Insight(
                    id=template.insight_id,
                    title=template.title,
                    description=template.description.format(name=collection.name, tagline=collection.tagline),
                    image_url=collection.hero_image_url,
                    collection_id=collection.id,
                    category=template.category,
                    confidence=confidence,
                )
            )
        return insights

    # ========================================
    # 推荐
    # ========================================
    def recommend(self, context: RecommendationContext, liked_ids: Iterable[str]) -> list[Recommendation]:
        if isinstance(context, PersonalizationModal):
            return self.recommend_for_trigger(context.trigger, liked_ids)
        if isinstance(context, CollectionBrowsing):
            return self.recommend_for_collection(context.collection_id, liked_ids)
        if isinstance(context, ProductViewing):
            return self.recommend_similar(context.product_id, liked_ids)
        raise ValueError(f"未知的推荐上下文: {context!r}")

    def recommend_for_trigger(
        self, trigger: PersonalizationTrigger, liked_ids: Iterable[str]
    ) -> list[Recommendation]:
        liked = set(liked_ids)
        name = trigger.collection_name

        recommendations: list[Recommendation] = []
        unliked = [p for p in self._snapshot.products_in_collection(name) if p.id not in liked]
        for index, product in enumerate(unliked[:INTRA_COLLECTION_LIMIT]):
            specs = product.specifications
            recommendations.append(
                Recommendation(
                    id=f"collection-rec-{index}",
                    product=product,
                    reason=(
                        f"Complements your {name} appreciation with {specs.movement} and "
                        f"{specs.case_material} craftsmanship"
                    ),
                    confidence=INTRA_COLLECTION_CONFIDENCE,
                    recommendation_type=RecommendationType.COLLECTION_COMPLEMENT,
                    priority=index + 1,
                )
            )

        cross = self._cross_collection(name, liked)
        if cross is not None:
            recommendations.append(cross)
        return recommendations

    def recommend_for_collection(self, collection_id: str, liked_ids: Iterable[str]) -> list[Recommendation]:
        liked = set(liked_ids)
        available = [p for p in self._snapshot.products_matching_collection(collection_id) if p.id not in liked]
        return [
            Recommendation(
                id=f"comp-{index}",
                product=product,
                reason=(
                    f"Expands your {product.collection} collection with distinctive "
                    f"{product.specifications.case_diameter} sizing"
                ),
                confidence=BROWSING_CONFIDENCE,
                recommendation_type=RecommendationType.COLLECTION_COMPLEMENT,
                priority=index + 1,
            )
            for index, product in enumerate(available[:INTRA_COLLECTION_LIMIT])
        ]

    def recommend_similar(self, product_id: str, liked_ids: Iterable[str]) -> list[Recommendation]:
        target = self._snapshot.product(product_id)
        if target is None:
            return []
        liked = set(liked_ids)
        similar = [
            p
            for p in self._snapshot.products_in_collection(target.collection)
            if p.id != product_id and p.id not in liked
        ]
        return [
            Recommendation(
                id=f"similar-{index}",
                product=product,
                reason=f"Shares {target.collection} DNA with {product.specifications.movement} excellence",
                confidence=SIMILAR_PRODUCT_CONFIDENCE,
                recommendation_type=RecommendationType.SIMILAR_STYLE,
                priority=index + 1,
            )
            for index, product in enumerate(similar[:INTRA_COLLECTION_LIMIT])
        ]

    def _cross_collection(self, collection_name: str, liked: set[str]) -> Optional[Recommendation]:
        canonical = CanonicalCollection.from_label(collection_name)
        rule = CROSS_COLLECTION_RULES.get(canonical) if canonical is not None else None
        if rule is None:
            return None
        candidate = next(
            (p for p in self._snapshot.products_in_collection(rule.target.value) if p.id not in liked),
            None,
        )
        if candidate is None:
            return None
        return Recommendation(
            id=rule.rec_id,
            product=candidate,
            reason=rule.reason,
            confidence=rule.confidence,
            recommendation_type=rule.recommendation_type,
            priority=CROSS_COLLECTION_PRIORITY,
        )

    # ========================================
    # 行动项（固定 4 项，顺序固定）
    # ========================================
    def build_actions(self, trigger: PersonalizationTrigger, collection: Optional[CollectionRecord]) -> list[Action]:
        collection_id = trigger.collection_id
        name = collection.name if collection else trigger.collection_name
        established_year = str(collection.established_year if collection else DEFAULT_ESTABLISHED_YEAR)

        return [
            Action(
                id="action-explore-collection",
                title=f"Explore Complete {name} Collection",
                action_type=ActionType.EXPLORE_COLLECTION,
                destination=f"collection-{collection_id}",
                metadata={
                    "collection_id": collection_id,
                    "collection_name": name,
                },
            ),
            Action(
                id="action-boutique-consultation",
                title=f"Schedule {name} Consultation",
                action_type=ActionType.SCHEDULE_BOUTIQUE,
                destination="boutique-appointment",
                metadata={
                    "collection_focus": collection_id,
                    "consultation_type": f"{name.lower()}_specialist",
                    "heritage_year": established_year,
                },
            ),
            Action(
                id="action-collection-newsletter",
                title=f"Join {name} Enthusiasts",
                action_type=ActionType.JOIN_NEWSLETTER,
                destination=f"newsletter-{collection_id}",
                metadata={
                    "newsletter_type": "collection_heritage",
                    "collection_id": collection_id,
                    "heritage_focus": collection.heritage if collection else "",
                },
            ),
            Action(
                id="action-heritage-catalog",
                title=f"Request {name} Heritage Catalog",
                action_type=ActionType.REQUEST_CATALOG,
                destination="catalog-request",
                metadata={
                    "catalog_type": "heritage_collection",
                    "focus_collection": collection_id,
                    "established_year": established_year,
                    "price_range": collection.formatted_price_range if collection else "",
                },
            ),
        ]


def _slug(name: str) -> str:
    return "-".join(name.lower().split())
