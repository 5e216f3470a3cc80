"""Configuration for the rack capacity engine."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rack_capacity.domain.services.capacity_search import CapacitySearchPolicy
from rack_capacity.domain.services.placement_validator import PlacementPolicy


class PlacementConfig(BaseModel):
    """Placement advisory configuration."""

    power_warning_margin: float = Field(default=0.10, ge=0.0, lt=1.0)
    gpu_keywords: tuple[str, ...] = Field(default=("gpu",))

    def to_policy(self) -> PlacementPolicy:
        return PlacementPolicy(
            power_warning_margin=self.power_warning_margin,
            gpu_keywords=tuple(k.lower() for k in self.gpu_keywords),
        )


class SearchConfig(BaseModel):
    """Capacity search configuration."""

    min_block_size: int = Field(default=3, ge=1)
    max_block_size: int = Field(default=6, ge=1)
    min_avg_headroom_kw: float = Field(default=2.0, ge=0.0)
    power_weight: float = Field(default=5.0, ge=0.0)
    ranking_limit: int = Field(default=5, ge=1)

    def to_policy(self) -> CapacitySearchPolicy:
        return CapacitySearchPolicy(
            min_block_size=self.min_block_size,
            max_block_size=self.max_block_size,
            min_avg_headroom_kw=self.min_avg_headroom_kw,
            power_weight=self.power_weight,
        )


class DataConfig(BaseModel):
    """Snapshot source configuration."""

    data_dir: Path = Field(default=Path("data/sites"))
    cache_ttl_seconds: float = Field(default=300.0, ge=0.0)


class AuditConfig(BaseModel):
    """Facility audit configuration."""

    power_drift_tolerance_kw: float = Field(default=0.1, ge=0.0)


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0")
    http_port: int = Field(default=8080, ge=1, le=65535)
    metrics_port: int = Field(default=8009, ge=1, le=65535)


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    environment: str = Field(default="development")
    tracing_enabled: bool = Field(default=False)
    otlp_endpoint: str | None = Field(default=None)


class Config(BaseSettings):
    """Main configuration."""

    model_config = SettingsConfigDict(env_prefix="RACK_CAPACITY_", env_nested_delimiter="__")

    placement: PlacementConfig = Field(default_factory=PlacementConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    return Config()
