from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # ─── Application ───────────────────────────────────────────────────────────
    APP_NAME: str = "Auto Management"
    APP_ENV:  str = "development"
    APP_DEBUG: bool = True
    APP_HOST:  str = "0.0.0.0"
    APP_PORT:  int = 3000
    LOG_LEVEL: str = "INFO"

    # ─── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL:          str  = "sqlite:///./auto.db"
    DATABASE_POOL_SIZE:    int  = 10
    DATABASE_MAX_OVERFLOW: int  = 20
    DATABASE_POOL_TIMEOUT: int  = 30
    DATABASE_ECHO:         bool = False

    # ─── Identity provider (bearer tokens) ─────────────────────────────────────
    # HS* algorithms use the shared secret, RS* algorithms the realm public key
    AUTH_SECRET_KEY: str
    AUTH_ALGORITHM:  str = "RS256"
    AUTH_AUDIENCE:   str | None = None
    AUTH_CLIENT_ID:  str = "auto-api"

    # ─── Paging ────────────────────────────────────────────────────────────────
    DEFAULT_PAGE_SIZE:   int = 5
    DEFAULT_PAGE_NUMBER: int = 0
    MAX_PAGE_SIZE:       int = 100

    # ─── Mail ──────────────────────────────────────────────────────────────────
    MAIL_ENABLED: bool = False
    MAIL_HOST:    str  = "localhost"
    MAIL_PORT:    int  = 25
    MAIL_FROM:    str  = "auto-api@acme.local"
    MAIL_TO:      str  = "admin@acme.local"

    # ─── CORS ──────────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:4200"

    def get_cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


settings = Settings()
