"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All identities and secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - admin_address and charity_payout_address are validated 0x addresses

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with SQLite
"""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from charity_ledger.core.domain_types import is_valid_address, normalize_address


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./charity_ledger.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_create_schema: bool = True

    # Token registry
    admin_address: str = "0x" + "a" * 40
    base_locator: str = "https://metadata.example.org/tokens/"

    # Charity descriptor (single charity per deployment)
    charity_name: str = "Example Charity"
    charity_link: str = "https://charity.example.org"
    charity_registered_at: str = "2024-01-01"
    charity_foundation: str = "Example Foundation"
    charity_source: str = "https://registry.example.org/charities/example"
    charity_suggested_price: int = 10_000_000_000_000_000
    charity_image_locator: str = "https://metadata.example.org/charity.png"
    charity_payout_address: str = "0x" + "c" * 40

    @field_validator("admin_address", "charity_payout_address")
    @classmethod
    def canonical_address(cls, v: str) -> str:
        if not is_valid_address(v):
            raise ValueError(f"not a 0x-prefixed 20-byte address: {v!r}")
        return normalize_address(v)

    # Collaborators
    proof_verifier: Literal["mock"] = "mock"
    payment_rail_auto_approve: bool = False

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
