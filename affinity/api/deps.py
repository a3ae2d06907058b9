# 依赖注入（按用户获取个性化引擎）
from __future__ import annotations

from fastapi import Request

from affinity.personalization.sessions import PersonalizationSessions


def get_personalization_sessions(request: Request) -> PersonalizationSessions:
    """应用启动事件中挂到 app.state 上"""
    sessions = getattr(request.app.state, "personalization_sessions", None)
    if sessions is None:
        raise RuntimeError("个性化会话未初始化")
    return sessions
