from __future__ import annotations

import re
import string
from enum import Enum
from typing import Optional

from loguru import logger

_WHITESPACE_RE = re.compile(r"\s+")


class CanonicalCollection(str, Enum):
    """
    规范化后的系列名

    声明顺序即固定优先级（同分时的排序依据）。
    """

    NAVITIMER = "Navitimer"
    CHRONOMAT = "Chronomat"
    SUPEROCEAN = "Superocean"
    SUPEROCEAN_HERITAGE = "Superocean Heritage"
    PREMIER = "Premier"
    AVENGER = "Avenger"

    @classmethod
    def from_label(cls, label: str) -> Optional["CanonicalCollection"]:
        """精确匹配（忽略大小写与首尾空白），不做子串推断"""
        key = _compact(label).casefold()
        for member in cls:
            if member.value.casefold() == key:
                return member
        return None

    @property
    def priority(self) -> int:
        return list(CanonicalCollection).index(self)


# 顺序敏感：heritage 必须先于 superocean 判断
_SUBSTRING_RULES: tuple[tuple[tuple[str, ...], CanonicalCollection], ...] = (
    (("superocean", "heritage"), CanonicalCollection.SUPEROCEAN_HERITAGE),
    (("superocean",), CanonicalCollection.SUPEROCEAN),
    (("chronomat",), CanonicalCollection.CHRONOMAT),
    (("navitimer",), CanonicalCollection.NAVITIMER),
    (("avenger",), CanonicalCollection.AVENGER),
    (("premier",), CanonicalCollection.PREMIER),
)


def match_canonical(text: str) -> Optional[CanonicalCollection]:
    lowered = text.casefold()
    for needles, canonical in _SUBSTRING_RULES:
        if all(needle in lowered for needle in needles):
            return canonical
    return None


def normalize_collection(label: str) -> str:
    """
    系列名规范化（用于按系列聚合喜欢数）

    - 按固定优先级做忽略大小写的子串匹配
    - 未命中任何规则时返回 title-case 后的原名，作为临时分组
    """
    compact = _compact(label)
    canonical = match_canonical(compact)
    if canonical is not None:
        return canonical.value
    return string.capwords(compact)


def infer_collection_from_product_id(product_id: str) -> Optional[str]:
    """目录里查不到的商品 ID，直接对 ID 做同样的子串推断；推断失败返回 None"""
    canonical = match_canonical(product_id or "")
    if canonical is None:
        logger.debug(f"无法从商品ID推断系列，不计入系列聚合: product_id='{product_id}'")
        return None
    return canonical.value


def collection_priority(name: str) -> tuple[int, str]:
    """排序键：固定系列按枚举顺序在前，临时分组按名称字典序在后"""
    canonical = CanonicalCollection.from_label(name)
    if canonical is not None:
        return canonical.priority, ""
    return len(CanonicalCollection), name


def _compact(text: str) -> str:
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.strip())
