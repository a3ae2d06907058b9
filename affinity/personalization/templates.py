"""
系列专属文案模板与跨系列推荐邻接表

均以 CanonicalCollection 为键，避免自由文本匹配因大小写或命名漂移而静默失配。
"""

from __future__ import annotations

from dataclasses import dataclass

from affinity.personalization.models import InsightCategory, RecommendationType
from affinity.personalization.normalization import CanonicalCollection


@dataclass(frozen=True)
class NarrativeTemplate:
    insight_id: str
    title: str
    # 可用占位符: {name} {tagline}
    description: str
    category: InsightCategory


@dataclass(frozen=True)
class CrossCollectionRule:
    target: CanonicalCollection
    rec_id: str
    reason: str
    confidence: float
    recommendation_type: RecommendationType


NARRATIVE_TEMPLATES: dict[CanonicalCollection, NarrativeTemplate] = {
    CanonicalCollection.NAVITIMER: NarrativeTemplate(
        insight_id="navitimer-pilot-heritage",
        title="Aviation Excellence",
        description=(
            "The Navitimer's legendary slide rule bezel and aviation DNA speak to those who value "
            "both precision and professional heritage. {tagline}"
        ),
        category=InsightCategory.LIFESTYLE,
    ),
    CanonicalCollection.CHRONOMAT: NarrativeTemplate(
        insight_id="chronomat-versatility",
        title="Versatile Luxury",
        description=(
            "{tagline} - Your Chronomat selections reveal an appreciation for timepieces that "
            "seamlessly transition from adventure to elegance."
        ),
        category=InsightCategory.LIFESTYLE,
    ),
    CanonicalCollection.SUPEROCEAN: NarrativeTemplate(
        insight_id="superocean-adventure",
        title="Ocean Explorer",
        description=(
            "{tagline} - Your choices reflect an adventurous spirit paired with luxury sensibilities, "
            "embodying Breitling's commitment to underwater excellence."
        ),
        category=InsightCategory.LIFESTYLE,
    ),
    CanonicalCollection.PREMIER: NarrativeTemplate(
        insight_id="premier-elegance",
        title="Sophisticated Elegance",
        description=(
            "{tagline} - Your Premier selections showcase an appreciation for refined sophistication "
            "and dress chronographs perfect for life's finest moments."
        ),
        category=InsightCategory.DESIGN,
    ),
    CanonicalCollection.AVENGER: NarrativeTemplate(
        insight_id="avenger-performance",
        title="Extreme Performance",
        description=(
            "{tagline} - Your choices demonstrate an appreciation for instruments engineered for "
            "the most demanding environments."
        ),
        category=InsightCategory.TECHNICAL,
    ),
    CanonicalCollection.SUPEROCEAN_HERITAGE: NarrativeTemplate(
        insight_id="heritage-vintage-soul",
        title="Vintage Soul, Modern Heart",
        description=(
            "{tagline} - Your appreciation reveals a sophisticated understanding of vintage "
            "aesthetics enhanced by contemporary technology."
        ),
        category=InsightCategory.HERITAGE,
    ),
}


CROSS_COLLECTION_RULES: dict[CanonicalCollection, CrossCollectionRule] = {
    CanonicalCollection.NAVITIMER: CrossCollectionRule(
        target=CanonicalCollection.CHRONOMAT,
        rec_id="nav-cross-chr",
        reason="The Chronomat shares aviation heritage with enhanced versatility for modern adventurers",
        confidence=0.85,
        recommendation_type=RecommendationType.SIMILAR_STYLE,
    ),
    CanonicalCollection.CHRONOMAT: CrossCollectionRule(
        target=CanonicalCollection.AVENGER,
        rec_id="chr-cross-ave",
        reason="The Avenger extends your sports chronograph passion with extreme durability",
        confidence=0.82,
        recommendation_type=RecommendationType.SIMILAR_STYLE,
    ),
    CanonicalCollection.SUPEROCEAN: CrossCollectionRule(
        target=CanonicalCollection.SUPEROCEAN_HERITAGE,
        rec_id="so-cross-soh",
        reason="Combines your diving passion with vintage aesthetics and collector appeal",
        confidence=0.88,
        recommendation_type=RecommendationType.COLLECTION_COMPLEMENT,
    ),
}
