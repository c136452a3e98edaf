import os
from pathlib import Path

from dotenv import load_dotenv

# A local .env next to the package is authoritative for development.
env_path = Path(__file__).resolve().parents[2] / ".env"
if env_path.exists():
    load_dotenv(env_path, override=True)


class Settings:
    """Lightweight settings loader using environment variables.

    Values are read once at import time; tests that need a different
    database build their own engine instead of mutating these.
    """

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-to-a-secure-random-string")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Be resilient to an accidental repeated prefix like
    # "DATABASE_URL=DATABASE_URL=..." coming from a malformed .env file.
    raw_db = os.getenv("DATABASE_URL", "sqlite:///./salepdv.db")
    if isinstance(raw_db, str) and raw_db.startswith("DATABASE_URL="):
        raw_db = raw_db.split("=", 1)[1]
    DATABASE_URL: str = raw_db

    APP_ENV: str = os.getenv("APP_ENV", os.getenv("ENV", "development")).lower()
    _default_pool_size = 5 if APP_ENV == "development" else 10
    _default_max_overflow = 2 if APP_ENV == "development" else 20
    _default_pool_recycle = 900 if APP_ENV == "development" else 1800

    # Pool tuning only applies to server databases (MySQL via pymysql)
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", str(_default_pool_size)))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", str(_default_max_overflow)))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", str(_default_pool_recycle)))  # seconds

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # Log request counters every N hits per route
    REQUEST_LOG_EVERY_N: int = int(os.getenv("REQUEST_LOG_EVERY_N", "100"))

    # Parallel archive updates dispatched by the "release table" action
    RELEASE_TABLE_WORKERS: int = max(1, int(os.getenv("RELEASE_TABLE_WORKERS", "4")))

    # Revenue buckets (day/month/year) are computed in this timezone
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "America/Sao_Paulo")

    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080",
    )


settings = Settings()
