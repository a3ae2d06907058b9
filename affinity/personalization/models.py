"""
个性化引擎数据模型

触发器、洞察、推荐、行动项与个性化内容包均为按需构建的值对象，不做缓存和持久化。
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from affinity.catalog.models import CollectionRecord, ProductRecord


class TriggerType(str, Enum):
    COLLECTION_AFFINITY = "collection_affinity"


class InsightCategory(str, Enum):
    HERITAGE = "heritage_appreciation"
    TECHNICAL = "technical_preference"
    DESIGN = "design_aesthetic"
    LIFESTYLE = "lifestyle_alignment"


class RecommendationType(str, Enum):
    SIMILAR_STYLE = "similar_style"
    COLLECTION_COMPLEMENT = "collection_complement"
    PRICE_POINT = "price_point"
    TRENDING = "trending_in_preference"


class ActionType(str, Enum):
    VIEW_RECOMMENDATIONS = "view_recommendations"
    SCHEDULE_BOUTIQUE = "schedule_boutique"
    EXPLORE_COLLECTION = "explore_collection"
    JOIN_NEWSLETTER = "join_newsletter"
    REQUEST_CATALOG = "request_catalog"


class PersonalizationTrigger(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: TriggerType = TriggerType.COLLECTION_AFFINITY
    collection_id: str
    collection_name: str = Field(..., description="规范系列名")
    like_count: int = Field(..., ge=0)
    confidence: float = Field(..., ge=0, le=1)
    reasoning: str


class Insight(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    image_url: str = ""
    collection_id: str
    category: InsightCategory
    confidence: float = Field(..., ge=0, le=1)


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    product: ProductRecord
    reason: str
    confidence: float = Field(..., ge=0, le=1)
    recommendation_type: RecommendationType
    priority: int = Field(..., ge=1, description="越小越靠前")


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    action_type: ActionType
    destination: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)


class PersonalizationMetadata(BaseModel):
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    experiment_id: Optional[str] = None
    external_personalization_id: Optional[str] = None


class PersonalizedContent(BaseModel):
    trigger: PersonalizationTrigger
    collection: CollectionRecord
    insights: list[Insight] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    metadata: PersonalizationMetadata


class PriceSummary(BaseModel):
    min: float = 0.0
    max: float = 0.0


class PersonalizationInsights(BaseModel):
    dominant_collection: Optional[CollectionRecord] = None
    dominant_collection_name: Optional[str] = None
    liked_products: list[ProductRecord] = Field(default_factory=list)
    collection_affinities: dict[str, int] = Field(default_factory=dict)
    price_range: PriceSummary = Field(default_factory=PriceSummary)
    preferred_materials: list[str] = Field(default_factory=list)
    total_likes: int = 0


# ========================================
# 推荐上下文
# ========================================
class CollectionBrowsing(BaseModel):
    kind: Literal["collection_browsing"] = "collection_browsing"
    collection_id: str


class ProductViewing(BaseModel):
    kind: Literal["product_viewing"] = "product_viewing"
    product_id: str


class PersonalizationModal(BaseModel):
    kind: Literal["personalization_modal"] = "personalization_modal"
    trigger: PersonalizationTrigger


RecommendationContext = Union[CollectionBrowsing, ProductViewing, PersonalizationModal]


# ========================================
# 页面浏览事件
# ========================================
class PageType(str, Enum):
    HOME = "home"
    COLLECTIONS = "collections"
    PRODUCT_DETAIL = "product_detail"
    SEARCH = "search"
    BOUTIQUES = "boutiques"
    ACCOUNT = "account"


class PageViewEvent(BaseModel):
    page: PageType
    collection_id: Optional[str] = None
    product_id: Optional[str] = None
    query: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
