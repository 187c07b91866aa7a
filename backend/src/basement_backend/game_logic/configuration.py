"""Simulation configuration objects for game sessions."""

from __future__ import annotations

from functools import cache

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SimulationDefaults(BaseSettings):
    """Load default simulation parameters from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BASEMENT_SIM_",
        extra="ignore",
    )

    starting_money: int = Field(default=1_000)
    starting_reputation: int = Field(default=0, ge=0)
    starting_fans: int = Field(default=0, ge=0)
    starting_stress: int = Field(default=0, ge=0, le=100)
    starting_connections: int = Field(default=0, ge=0)
    rng_seed: int | None = Field(default=None)
    booking_fee_per_performer: int = Field(default=50, ge=0)
    bar_spend_per_head: float = Field(default=5.0, ge=0)
    success_threshold: float = Field(default=0.5, gt=0, le=1)
    failed_show_reputation_penalty: int = Field(default=10, ge=0)
    min_lead_time: int = Field(default=1, ge=1)
    max_lead_time: int = Field(default=5, ge=1)
    culture_mismatch_threshold: int = Field(default=50, ge=0, le=100)
    promotion_cost_per_hype: int = Field(default=10, ge=1)
    installed_wear_per_show: float = Field(default=2.0, ge=0)
    storage_wear_per_show: float = Field(default=0.5, ge=0)

    def to_config(self) -> SimulationConfiguration:
        """Convert defaults into an immutable configuration object."""
        return SimulationConfiguration(**self.model_dump())


class SimulationConfiguration(BaseModel):
    """Immutable representation of the tuning parameters for a session."""

    model_config = ConfigDict(frozen=True)

    starting_money: int = 1_000
    starting_reputation: int = Field(default=0, ge=0)
    starting_fans: int = Field(default=0, ge=0)
    starting_stress: int = Field(default=0, ge=0, le=100)
    starting_connections: int = Field(default=0, ge=0)
    rng_seed: int | None = None
    booking_fee_per_performer: int = Field(default=50, ge=0)
    bar_spend_per_head: float = Field(default=5.0, ge=0)
    success_threshold: float = Field(default=0.5, gt=0, le=1)
    failed_show_reputation_penalty: int = Field(default=10, ge=0)
    min_lead_time: int = Field(default=1, ge=1)
    max_lead_time: int = Field(default=5, ge=1)
    culture_mismatch_threshold: int = Field(default=50, ge=0, le=100)
    promotion_cost_per_hype: int = Field(default=10, ge=1)
    installed_wear_per_show: float = Field(default=2.0, ge=0)
    storage_wear_per_show: float = Field(default=0.5, ge=0)

    def for_session(
        self, overrides: SessionOverrides | None = None
    ) -> SimulationConfiguration:
        """Create a session-specific configuration by applying overrides if provided."""
        if overrides is None:
            return self
        return overrides.apply(self)


class SessionOverrides(BaseModel):
    """Optional session-specific overrides for simulation settings."""

    model_config = ConfigDict(frozen=True)

    starting_money: int | None = None
    starting_reputation: int | None = Field(default=None, ge=0)
    starting_fans: int | None = Field(default=None, ge=0)
    starting_stress: int | None = Field(default=None, ge=0, le=100)
    rng_seed: int | None = None
    booking_fee_per_performer: int | None = Field(default=None, ge=0)
    bar_spend_per_head: float | None = Field(default=None, ge=0)

    def apply(self, config: SimulationConfiguration) -> SimulationConfiguration:
        """Return a copy of *config* with overrides applied."""
        updates = self.model_dump(exclude_none=True)
        return SimulationConfiguration(**{**config.model_dump(), **updates})


@cache
def get_default_simulation_configuration() -> SimulationConfiguration:
    """Return the cached default simulation configuration."""
    return SimulationDefaults().to_config()


def build_session_configuration(
    overrides: SessionOverrides | None = None,
) -> SimulationConfiguration:
    """Construct a configuration for a session, applying optional overrides."""
    defaults = get_default_simulation_configuration()
    if overrides is None:
        return defaults
    return overrides.apply(defaults)


__all__ = [
    "SessionOverrides",
    "SimulationConfiguration",
    "SimulationDefaults",
    "build_session_configuration",
    "get_default_simulation_configuration",
]
