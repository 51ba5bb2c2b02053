"""Application configuration from environment variables."""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WORK_DESCRIPTION = "Maintenance of snow disposal sites for receiving removed snow"


def parse_list(raw: str | None) -> list[str]:
    """Split a comma separated setting into trimmed, non-empty items."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./acts.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Server log file")

    # HTTP
    http_host: str = Field(default="0.0.0.0")
    http_port: int = Field(default=7089)

    # Acts
    acts_vat_rate: Decimal = Field(default=Decimal("12.0"), ge=0, description="VAT rate, percent")
    acts_valid_statuses: str = Field(
        default="OK",
        description="Comma separated trip statuses eligible for billing",
    )
    acts_number_prefix: str = Field(default="ACT")
    acts_work_description: str = Field(default=DEFAULT_WORK_DESCRIPTION)
    acts_generate_roles: str = Field(
        default="AKIMAT,KGU,CONTRACTOR,LANDFILL",
        description="Comma separated roles allowed to generate acts",
    )

    # Documents
    pdf_font_path: str | None = Field(
        default=None,
        description="TrueType font with Cyrillic glyphs embedded into PDF documents",
    )

    # API
    api_title: str = Field(default="Snow Acts API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")

    @property
    def valid_statuses(self) -> list[str]:
        """Trip status whitelist, upper-cased."""
        return [status.upper() for status in parse_list(self.acts_valid_statuses)] or ["OK"]

    @property
    def generate_roles(self) -> list[str]:
        return [role.upper() for role in parse_list(self.acts_generate_roles)]

    @property
    def number_prefix(self) -> str:
        return self.acts_number_prefix.strip() or "ACT"

    @property
    def work_description(self) -> str:
        return self.acts_work_description.strip() or DEFAULT_WORK_DESCRIPTION


@lru_cache
def get_settings() -> Settings:
    """Return process-wide settings (cached)."""
    return Settings()


__all__ = ["Settings", "get_settings", "parse_list", "DEFAULT_WORK_DESCRIPTION"]
