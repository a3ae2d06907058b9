"""
个性化服务 API 端点

- 喜欢列表：like/unlike（返回最新触发结果）
- 触发器与个性化内容包
- 聚合洞察与上下文推荐
- 页面浏览记录
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from affinity.api.deps import get_personalization_sessions
from affinity.personalization.messaging import collection_personality, luxury_subtitle, luxury_title
from affinity.personalization.models import (
    CollectionBrowsing,
    PageViewEvent,
    PersonalizationInsights,
    PersonalizationModal,
    PersonalizedContent,
    ProductViewing,
    RecommendationContext,
)
from affinity.personalization.sessions import PersonalizationSessions
from affinity.schemas.personalization_schema import (
    LikedProductsResponse,
    MessageResponse,
    RecommendationListResponse,
    TriggerResponse,
)

router = APIRouter()


# ========================================
# 喜欢列表
# ========================================
@router.get("/{user_id}/likes", response_model=LikedProductsResponse, summary="获取喜欢列表")
async def get_likes(
    user_id: str,
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> LikedProductsResponse:
    try:
        engine = await sessions.get(user_id)
        liked = engine.liked_ids()
        return LikedProductsResponse(
            user_id=user_id, liked_ids=liked, total=len(liked), trigger=engine.evaluate_trigger()
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"获取喜欢列表失败: user_id='{user_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.put("/{user_id}/likes/{product_id}", response_model=LikedProductsResponse, summary="喜欢商品")
async def like_product(
    user_id: str,
    product_id: str,
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> LikedProductsResponse:
    try:
        engine = await sessions.get(user_id)
        trigger = await engine.like(product_id)
        liked = engine.liked_ids()
        return LikedProductsResponse(user_id=user_id, liked_ids=liked, total=len(liked), trigger=trigger)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"喜欢商品失败: user_id='{user_id}', product_id='{product_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.delete("/{user_id}/likes/{product_id}", response_model=LikedProductsResponse, summary="取消喜欢")
async def unlike_product(
    user_id: str,
    product_id: str,
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> LikedProductsResponse:
    try:
        engine = await sessions.get(user_id)
        trigger = await engine.unlike(product_id)
        liked = engine.liked_ids()
        return LikedProductsResponse(user_id=user_id, liked_ids=liked, total=len(liked), trigger=trigger)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"取消喜欢失败: user_id='{user_id}', product_id='{product_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


# ========================================
# 触发器 / 内容包 / 洞察
# ========================================
@router.get("/{user_id}/trigger", response_model=TriggerResponse, summary="获取当前触发器")
async def get_trigger(
    user_id: str,
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> TriggerResponse:
    try:
        engine = await sessions.get(user_id)
        trigger = engine.evaluate_trigger()
        if trigger is None:
            raise HTTPException(status_code=404, detail="尚未触发个性化")
        return TriggerResponse(
            trigger=trigger,
            title=luxury_title(trigger, engine.snapshot),
            subtitle=luxury_subtitle(trigger, engine.snapshot),
            personality=collection_personality(trigger, engine.snapshot),
        )
    except HTTPException:
        raise
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"获取触发器失败: user_id='{user_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/{user_id}/content", response_model=PersonalizedContent, summary="获取个性化内容包")
async def get_content(
    user_id: str,
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> PersonalizedContent:
    try:
        engine = await sessions.get(user_id)
        content = engine.compose()
        if content is None:
            raise HTTPException(status_code=404, detail="暂无个性化内容")
        return content
    except HTTPException:
        raise
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"组装个性化内容失败: user_id='{user_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/{user_id}/insights", response_model=PersonalizationInsights, summary="获取聚合洞察")
async def get_insights(
    user_id: str,
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> PersonalizationInsights:
    try:
        engine = await sessions.get(user_id)
        return engine.insights()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"获取聚合洞察失败: user_id='{user_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/{user_id}/recommendations", response_model=RecommendationListResponse, summary="上下文推荐")
async def get_recommendations(
    user_id: str,
    collection_id: Optional[str] = Query(default=None, description="浏览中的系列ID"),
    product_id: Optional[str] = Query(default=None, description="浏览中的商品ID"),
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> RecommendationListResponse:
    try:
        if collection_id and product_id:
            raise ValueError("collection_id 与 product_id 只能提供一个")

        engine = await sessions.get(user_id)
        context: RecommendationContext
        if collection_id:
            context = CollectionBrowsing(collection_id=collection_id)
        elif product_id:
            context = ProductViewing(product_id=product_id)
        else:
            trigger = engine.evaluate_trigger()
            if trigger is None:
                return RecommendationListResponse(context="personalization_modal", items=[])
            context = PersonalizationModal(trigger=trigger)

        return RecommendationListResponse(context=context.kind, items=engine.recommendations(context))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"获取推荐失败: user_id='{user_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


# ========================================
# 页面浏览
# ========================================
@router.post("/{user_id}/page-views", response_model=MessageResponse, summary="记录页面浏览")
async def track_page_view(
    user_id: str,
    event: PageViewEvent,
    sessions: PersonalizationSessions = Depends(get_personalization_sessions),
) -> MessageResponse:
    try:
        engine = await sessions.get(user_id)
        await engine.track_page_view(event)
        return MessageResponse(message=f"{event.page.value} 已记录", success=True)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"记录页面浏览失败: user_id='{user_id}', err={exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
