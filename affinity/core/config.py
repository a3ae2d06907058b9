# 读取 .env 配置
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "catalog" / "data" / "catalog.json"


class Settings(BaseSettings):
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # Redis（喜欢列表持久化）
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_UNIX_SOCKET: str = ""

    # Catalog
    CATALOG_PATH: str = str(_DEFAULT_CATALOG_PATH)

    # Personalization
    PERSONALIZATION_KEY_PREFIX: str = ""
    PERSONALIZATION_THRESHOLD: int = 4
    PERSONALIZATION_CONFIDENCE_SATURATION: float = 6.0
    PERSONALIZATION_WRITE_RETRIES: int = 1
    PAGE_VIEW_HISTORY_MAX: int = 50
    PERSONALIZATION_SESSION_MAX: int = 1000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore" # 忽略多余的环境变量
    )

settings = Settings()
