"""
OrderDesk — Configuration
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "orderdesk"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # ── PostgreSQL ────────────────────────────────────────────
    POSTGRES_HOST: str = "orderdesk-db"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "orderdesk_db"
    POSTGRES_USER: str = "orderdesk_user"
    POSTGRES_PASSWORD: str = "orderdesk_pass"
    DATABASE_URL: str | None = None  # full override, e.g. sqlite+aiosqlite:///./orderdesk.db

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # ── Redis ─────────────────────────────────────────────────
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ── Optimistic Locking Retry ──────────────────────────────
    OPT_LOCK_MAX_RETRIES: int = 3
    OPT_LOCK_BASE_DELAY_MS: int = 20      # base exponential backoff delay in ms
    OPT_LOCK_MAX_DELAY_MS: int = 500      # max backoff cap in ms
    OPT_LOCK_JITTER_MS: int = 20          # random jitter range in ms

    # ── Ordering ──────────────────────────────────────────────
    ORDER_PLACEMENT_TIMEOUT_SECONDS: float = 10.0
    ORDER_REJECT_TOTAL_MISMATCH: bool = True
    DEFAULT_OPTION_SURCHARGES: dict[str, int] = {"shot": 500, "syrup": 300}
    SEED_ON_STARTUP: bool = True

    # ── Idempotency ───────────────────────────────────────────
    IDEMPOTENCY_ENABLED: bool = True
    IDEMPOTENCY_KEY_TTL_SECONDS: int = 86400

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 5.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
