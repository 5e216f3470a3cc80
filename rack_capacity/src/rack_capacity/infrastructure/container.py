"""Dependency injection container for the rack capacity engine."""

from dataclasses import dataclass

import structlog
from opentelemetry import trace

from rack_capacity.adapters.outbound.json_snapshot_source import JsonSnapshotSource
from rack_capacity.adapters.outbound.metrics import PrometheusExporter
from rack_capacity.application.coordinator import PlanningCoordinator
from rack_capacity.infrastructure.config import Config, get_config
from rack_capacity.infrastructure.logging import setup_logging
from rack_capacity.infrastructure.tracing import setup_tracing
from rack_capacity.ports.outbound.snapshot_source import SnapshotSource


@dataclass
class Container:
    """Wires the snapshot source, policies and observability into a coordinator."""

    config: Config
    logger: structlog.stdlib.BoundLogger
    tracer: trace.Tracer
    metrics: PrometheusExporter
    snapshot_source: SnapshotSource
    coordinator: PlanningCoordinator

    _instance: "Container | None" = None

    @classmethod
    def create(cls, snapshot_source: SnapshotSource | None = None) -> "Container":
        """Create the singleton container.

        Args:
            snapshot_source: Replaces the JSON document source configured
                under ``data``. Ignored once the container exists.
        """
        if cls._instance is not None:
            return cls._instance

        config = get_config()
        logger = setup_logging(config.observability)
        tracer = setup_tracing(config.observability)
        metrics = PrometheusExporter()

        if snapshot_source is None:
            snapshot_source = JsonSnapshotSource(
                config.data.data_dir,
                cache_ttl_seconds=config.data.cache_ttl_seconds,
            )

        coordinator = PlanningCoordinator(
            snapshot_source,
            placement_policy=config.placement.to_policy(),
            search_policy=config.search.to_policy(),
            ranking_limit=config.search.ranking_limit,
            power_drift_tolerance_kw=config.audit.power_drift_tolerance_kw,
            metrics=metrics,
            tracer=tracer,
        )

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            snapshot_source=snapshot_source,
            coordinator=coordinator,
        )
        logger.info(
            "container_initialized",
            source=type(snapshot_source).__name__,
            data_dir=str(config.data.data_dir),
            tracing=config.observability.tracing_enabled,
        )
        return cls._instance

    @classmethod
    def get(cls) -> "Container":
        """Get the container, creating it from configuration if needed."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access rebuilds it."""
        cls._instance = None


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
