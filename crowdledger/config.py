"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Secrets (jwt_secret, database credentials) come from the environment or .env
    - get_settings() is cached (lru_cache): one Settings instance per process
    - Ledger knobs are validated at startup: timeout > 0, at least one CAS attempt

Design Decisions:
    - pydantic-settings over raw os.environ: type coercion and validation in one place
    - Defaults for everything but secrets so docker-compose works with no .env
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "postgresql+asyncpg://crowd:crowd@db:5432/crowdledger"
    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)

    # Identity: tokens are issued by the external auth service, only verified here
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_identity_claim: str = "id"
    jwt_leeway_seconds: int = Field(0, ge=0)

    # Ledger
    contribution_timeout_seconds: float = Field(10.0, gt=0)
    ledger_max_cas_attempts: int = Field(3, ge=1)

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v: str) -> str:
        """Hosting platforms hand out postgresql://; the engine needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
