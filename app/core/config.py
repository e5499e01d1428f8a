from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://craving:craving@db:5432/craving"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "info"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    # Events older than this are evicted on the next append.
    RETENTION_DAYS: int = 90

    # Upper bound on waiting for the per-user write lock and for a pooled
    # DB connection.
    STORE_TIMEOUT_SECONDS: float = 5.0

    # Seeds the recommendation picker. Unset = non-deterministic.
    RECOMMENDATION_SEED: Optional[int] = None

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
