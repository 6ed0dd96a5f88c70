"""Configuration management for the Smart Library core.

Settings are read from the environment (``SMART_LIBRARY_`` prefix) or an
``.env`` file and validated with Pydantic v2:

1. Server metadata - name and version announced by the tool server
2. Recommendation defaults - batch size used when callers pass none
3. Audit persistence - in-memory or SQLite-backed audit trail
4. Development - log level, debug mode and demo data seeding
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LibraryConfig(BaseSettings):
    """Runtime configuration for the lending and recommendation services."""

    model_config = SettingsConfigDict(
        # Use SMART_LIBRARY_ prefix for all env vars
        env_prefix="SMART_LIBRARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Server Metadata ===

    server_name: str = Field(
        default="smart-library",
        description="Server name announced to tool clients",
        pattern=r"^[a-z0-9-]+$",
    )

    server_version: str = Field(
        default="0.1.0",
        description="Server version",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Recommendation Configuration ===

    default_recommendation_count: int = Field(
        default=10,
        description="Number of recommendations produced when the caller gives none",
        ge=1,
        le=50,
    )

    # === Audit Configuration ===

    audit_backend: str = Field(
        default="memory",
        description="Where audit events are kept",
        pattern=r"^(memory|sqlite)$",
    )

    database_path: Path = Field(
        default=Path("data/audit.db"),
        description="SQLite file used when audit_backend is 'sqlite'",
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    seed_demo_data: bool = Field(
        default=False,
        description="Populate the catalog with generated demo data on startup",
    )

    demo_item_count: int = Field(
        default=40,
        description="Number of catalog items generated when seeding demo data",
        ge=0,
        le=1000,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names from the environment."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        """Keep server names readable in client listings."""
        if len(v) < 3:
            raise ValueError("Server name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Server name must not exceed 50 characters")
        return v

    @property
    def is_development(self) -> bool:
        """True when verbose diagnostics should be enabled."""
        return self.debug or self.log_level == "DEBUG"

    @property
    def server_info(self) -> dict[str, str]:
        """Name and version pair sent during client initialization."""
        return {
            "name": self.server_name,
            "version": self.server_version,
        }

    def get_database_url(self) -> str:
        """SQLAlchemy URL of the audit database."""
        return f"sqlite:///{self.database_path.absolute()}"


class _ConfigStore:
    """Internal storage for the configuration singleton."""

    _instance: LibraryConfig | None = None


def get_config() -> LibraryConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = LibraryConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
