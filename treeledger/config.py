"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Caller identity
    caller_identity_header: str = Field(
        default="X-Caller-Identity",
        description="Request header carrying the authenticated caller identity"
    )
    coordinator_identities: list[str] = Field(
        default=[],
        description="Identities holding the coordinator role for planting sites and diversity goals"
    )

    # Planting site priority
    min_priority_score: int = Field(
        default=0,
        description="Lowest accepted planting site priority score"
    )
    max_priority_score: int = Field(
        default=100,
        description="Highest accepted planting site priority score"
    )

    # Spatial queries
    nearby_sites_max_radius_m: float = Field(
        default=50_000.0,
        description="Largest search radius in meters accepted by nearby site queries"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )
    rate_limit_enabled: bool = Field(
        default=True,
        description="Whether per-client rate limiting is applied"
    )

    # Application Settings
    app_name: str = Field(
        default="Tree Ledger Registry",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()
