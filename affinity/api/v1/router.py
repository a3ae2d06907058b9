# 路由汇总
from fastapi import APIRouter

from affinity.api.v1.endpoints import personalization

api_router = APIRouter()

# 挂载个性化模块 (访问地址: /api/v1/personalization/...)
api_router.include_router(personalization.router, prefix="/personalization", tags=["个性化模块"])
