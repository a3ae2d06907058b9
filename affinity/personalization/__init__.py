"""
个性化引擎模块

提供喜欢列表追踪、系列规范化、触发判定、内容组装与聚合洞察的核心实现。
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from affinity.personalization.engine import EngineConfig, PersonalizationEngine
    from affinity.personalization.keys import PersonalizationKeys
    from affinity.personalization.sessions import PersonalizationSessions
    from affinity.personalization.store import KeyValueStore, RedisKeyValueStore

__all__ = [
    "EngineConfig",
    "KeyValueStore",
    "PersonalizationEngine",
    "PersonalizationKeys",
    "PersonalizationSessions",
    "RedisKeyValueStore",
]
