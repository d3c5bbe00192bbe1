"""Configuration management for Mapset Timing."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAPSET_TIMING_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Snapping
    snap_tolerance_ms: float = Field(
        default=1.0,
        description="Maximum distance from a divisor's grid for a time to count as snapped to it",
    )
    unsnap_minor_ms: float = Field(
        default=1.0,
        description="Unsnap magnitude reported as a minor issue",
    )
    unsnap_problem_ms: float = Field(
        default=2.0,
        description="Unsnap magnitude reported as a problem",
    )

    # Rare divisors
    rare_count_warning: int = Field(
        default=3,
        description="A divisor used this many times or fewer is a warning",
    )
    rare_count_minor: int = Field(
        default=7,
        description="A divisor used this many times or fewer is a minor issue",
    )
    rare_percent_warning: float = Field(
        default=0.005,
        description="A divisor making up less than this share of snappings is a warning",
    )
    rare_percent_minor: float = Field(
        default=0.05,
        description="A divisor making up less than this share of snappings is a minor issue",
    )
    rare_divisor_floor: dict[str, int] = Field(
        default_factory=dict,
        description='Per-mode lowest divisor considered for rarity, e.g. {"taiko": 6}',
    )

    # Cross-difficulty consistency
    edge_match_ms: float = Field(
        default=3.0,
        description="Edges closer than this in two difficulties correspond to each other",
    )
    consistency_margin_ms: float = Field(
        default=2.0,
        description="Unsnap margin subtracted from consistency ranges",
    )
    max_workers: int | None = Field(
        default=None,
        description="Threads used to compare a difficulty against harder ones (None = executor default)",
    )

    # Timing lines
    downbeat_tolerance_ms: float = Field(
        default=1.0,
        description="Drift allowed between downbeats of two uninherited lines",
    )
    nightcore_cymbals: bool = Field(
        default=False,
        description="Treat shifting the nightcore mod cymbals as a reason for an uninherited line",
    )
    kiai_unsnap_minor_ms: float = Field(
        default=1.0,
        description="Kiai unsnap reported as a minor issue",
    )
    kiai_unsnap_warning_ms: float = Field(
        default=10.0,
        description="Kiai unsnap reported as a warning",
    )
    before_line_window_ms: float = Field(
        default=5.0,
        description="Objects this close to a slider velocity change are flagged",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(**overrides: object) -> Settings:
    """Configure settings with overrides. Useful for testing."""
    global _settings
    _settings = Settings(**overrides)  # type: ignore[arg-type]
    return _settings
