# 【入口】整个程序的启动点
import sys

from fastapi import FastAPI
from loguru import logger

from affinity.api.v1.router import api_router
from affinity.catalog.service import StaticCatalogService
from affinity.catalog.snapshot import CatalogSnapshot
from affinity.core.config import settings
from affinity.core.redis_client import redis_client
from affinity.personalization.engine import EngineConfig
from affinity.personalization.keys import PersonalizationKeys
from affinity.personalization.sessions import PersonalizationSessions
from affinity.personalization.store import RedisKeyValueStore


# ========================================
# Loguru 日志配置
# ========================================
def setup_logger():
    """配置 loguru 日志系统"""
    # 移除默认的 handler
    logger.remove()

    # 添加控制台输出（彩色）
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=settings.LOG_LEVEL,
        colorize=True,
    )

    # 如果配置了日志文件，添加文件输出
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            rotation="100 MB",  # 日志文件达到 100MB 时轮转
            retention="10 days",  # 保留最近 10 天的日志
            compression="zip",  # 压缩旧日志
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=settings.LOG_LEVEL,
        )

    logger.info("Loguru 日志系统初始化完成")


# 初始化日志
setup_logger()


# ========================================
# FastAPI 应用配置
# ========================================
app = FastAPI(
    title="Watch Collection Personalization",
    description="基于喜欢列表的系列偏好识别、个性化内容组装与推荐",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# 注册所有路由，统一加前缀 /api/v1
app.include_router(api_router, prefix="/api/v1")


def build_engine_config() -> EngineConfig:
    return EngineConfig(
        threshold=settings.PERSONALIZATION_THRESHOLD,
        confidence_saturation=settings.PERSONALIZATION_CONFIDENCE_SATURATION,
        write_retries=settings.PERSONALIZATION_WRITE_RETRIES,
        page_view_history_max=settings.PAGE_VIEW_HISTORY_MAX,
    )


@app.on_event("startup")
async def startup_event():
    """应用启动事件"""
    logger.info("=" * 60)
    logger.info("个性化服务正在启动...")
    logger.info(f"调试模式: {settings.DEBUG}")
    logger.info(f"日志级别: {settings.LOG_LEVEL}")
    logger.info(f"触发阈值: {settings.PERSONALIZATION_THRESHOLD}")
    logger.info("=" * 60)

    await redis_client.connect()
    snapshot = await CatalogSnapshot.load(StaticCatalogService(settings.CATALOG_PATH))
    app.state.personalization_sessions = PersonalizationSessions(
        snapshot,
        RedisKeyValueStore(redis_client),
        keys=PersonalizationKeys.with_prefix(settings.PERSONALIZATION_KEY_PREFIX),
        config=build_engine_config(),
        max_sessions=settings.PERSONALIZATION_SESSION_MAX,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """应用关闭事件"""
    logger.info("个性化服务正在关闭...")
    sessions = getattr(app.state, "personalization_sessions", None)
    if sessions is not None:
        await sessions.close()
    await redis_client.close()


@app.get("/")
def health_check():
    """健康检查端点"""
    return {
        "status": "ok",
        "message": "Personalization service is running!",
        "version": "1.0.0",
        "redis": redis_client.is_connected,
    }
