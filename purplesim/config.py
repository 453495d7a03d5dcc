"""PurpleSim configuration system using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PurpleSimConfig(BaseSettings):
    """Main configuration class. Loads from .env file and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "PURPLESIM"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Logging
    log_dir: str = "logs"
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    # Simulation loop
    simulation_tick_interval: float = 3.5  # seconds between launch rolls
    simulation_launch_probability: float = 0.6  # chance a tick launches a chain
    simulation_initial_chain_delays: list[float] = [1.0, 3.0, 6.0]
    simulation_duration_minutes: int = 60
    simulation_seed: Optional[int] = None

    # Stage timing (seconds)
    detection_delay_min: float = 2.0
    detection_delay_max: float = 17.0
    mitigation_delay_min: float = 10.0
    mitigation_delay_max: float = 45.0

    # Notifications
    notification_max_items: int = 13

    # WebSocket
    ws_max_connections: int = 50
    ws_queue_size: int = 100
    ws_heartbeat_interval: int = 30

    @field_validator("simulation_launch_probability")
    @classmethod
    def validate_probability(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("simulation_launch_probability must be between 0 and 1")
        return v

    @field_validator(
        "detection_delay_min",
        "detection_delay_max",
        "mitigation_delay_min",
        "mitigation_delay_max",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delays must not be negative")
        return v

    @field_validator("simulation_tick_interval")
    @classmethod
    def validate_tick_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("simulation_tick_interval must be positive")
        return v

    @field_validator("simulation_initial_chain_delays")
    @classmethod
    def validate_initial_delays(cls, v: list[float]) -> list[float]:
        if any(d < 0 for d in v):
            raise ValueError("simulation_initial_chain_delays must not contain negative delays")
        return v

    @field_validator("notification_max_items")
    @classmethod
    def validate_max_items(cls, v: int) -> int:
        if v < 1:
            raise ValueError("notification_max_items must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_delay_ranges(self) -> "PurpleSimConfig":
        if self.detection_delay_min > self.detection_delay_max:
            raise ValueError("detection_delay_min must not exceed detection_delay_max")
        if self.mitigation_delay_min > self.mitigation_delay_max:
            raise ValueError("mitigation_delay_min must not exceed mitigation_delay_max")
        return self

    @property
    def detection_delay_range(self) -> tuple[float, float]:
        return (self.detection_delay_min, self.detection_delay_max)

    @property
    def mitigation_delay_range(self) -> tuple[float, float]:
        return (self.mitigation_delay_min, self.mitigation_delay_max)

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent.parent


def get_config() -> PurpleSimConfig:
    """Factory function to create config instance."""
    return PurpleSimConfig()
