"""
个性化服务 API Schema

定义喜欢列表、触发器、推荐列表相关的响应模型。
内容包与洞察直接复用 affinity.personalization.models 中的值对象。
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from affinity.personalization.models import PersonalizationTrigger, Recommendation


class LikedProductsResponse(BaseModel):
    """喜欢列表响应（like/unlike 后附带最新触发结果）"""

    user_id: str
    liked_ids: list[str] = Field(default_factory=list, description="已喜欢的商品ID（插入顺序）")
    total: int = Field(..., ge=0)
    trigger: Optional[PersonalizationTrigger] = Field(default=None, description="当前触发器（未触发为 null）")


class TriggerResponse(BaseModel):
    trigger: PersonalizationTrigger
    title: str = Field(..., description="弹窗标题")
    subtitle: str = Field(..., description="弹窗副标题")
    personality: str = Field(..., description="系列气质描述")


class RecommendationListResponse(BaseModel):
    context: str = Field(..., description="推荐上下文: collection_browsing/product_viewing/personalization_modal")
    items: list[Recommendation] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
    success: bool = True
