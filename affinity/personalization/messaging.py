"""
触发器展示文案（弹窗标题、副标题、系列气质描述）
"""

from __future__ import annotations

from affinity.catalog.snapshot import CatalogSnapshot
from affinity.personalization.models import PersonalizationTrigger

DEFAULT_TITLE = "Luxury Curated for Your Taste"
DEFAULT_SUBTITLE = (
    "Your sophisticated selections reveal refined horological taste deserving of personalized attention."
)
DEFAULT_PERSONALITY = "Swiss luxury timepieces of exceptional craftsmanship"


def luxury_title(trigger: PersonalizationTrigger, snapshot: CatalogSnapshot) -> str:
    collection = snapshot.collection(trigger.collection_id)
    if collection is None or not collection.tagline:
        return DEFAULT_TITLE
    return collection.tagline


def luxury_subtitle(trigger: PersonalizationTrigger, snapshot: CatalogSnapshot) -> str:
    collection = snapshot.collection(trigger.collection_id)
    if collection is None:
        return DEFAULT_SUBTITLE
    return (
        f"Based on your {trigger.like_count} selections from the {collection.name} collection, "
        "we've curated an exclusive experience that honors your sophisticated taste for "
        f"{collection.heritage.lower()}."
    )


def collection_personality(trigger: PersonalizationTrigger, snapshot: CatalogSnapshot) -> str:
    collection = snapshot.collection(trigger.collection_id)
    if collection is None or not collection.description:
        return DEFAULT_PERSONALITY
    return collection.description
