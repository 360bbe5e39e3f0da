from __future__ import annotations

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300

    REDIS_URL: str = "redis://localhost:6379/0"

    CORS_ORIGINS: list[str] = ["*"]

    SCORE_PROVIDER_URL: str = "http://localhost:8081"
    SCORE_PROVIDER_TIMEOUT: float = 5.0

    SCORE_TOPIC: str = "event-scores"
    SCORE_STREAM_MAXLEN: int = 100_000

    POLL_INTERVAL: float = 10.0
    POLL_INITIAL_DELAY: float = 1.0
    POLL_MAX_CONCURRENCY: int = 32

    RECONCILE_INTERVAL: float = 10.0
    RUN_RECONCILER_IN_APP: bool = True
    OUTBOX_MAX_RETRIES: int = Field(default=5, ge=2)
    OUTBOX_CLAIM_TTL: float = 30.0
    PUBLISH_TIMEOUT: float = 5.0

    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.POSTGRES_DB}"
        )

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
