"""Prometheus metrics export for placement planning.

Exports validation outcomes, capacity search results and latencies in
Prometheus format for time-series collection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from rack_capacity.domain.services.facility_audit import FindingSeverity

if TYPE_CHECKING:
    from rack_capacity.domain.services.capacity_search import CapacitySuggestion
    from rack_capacity.domain.services.facility_audit import AuditReport
    from rack_capacity.domain.services.placement_validator import ValidationResult


class PrometheusExporter:
    """Export rack capacity metrics to Prometheus."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize Prometheus exporter.

        Args:
            registry: Prometheus collector registry. Creates a private one if None.
        """
        self.registry = registry or CollectorRegistry()

        # Placement metrics
        self.validations = Counter(
            'placement_validations_total',
            'Placement validations by outcome',
            ['outcome'],
            registry=self.registry,
        )

        self.placement_conflicts = Counter(
            'placement_conflicts_total',
            'Unit conflicts reported by placement validation',
            registry=self.registry,
        )

        self.placement_warnings = Counter(
            'placement_warnings_total',
            'Advisory warnings emitted by placement validation',
            registry=self.registry,
        )

        self.slot_queries = Counter(
            'slot_queries_total',
            'Free-slot queries',
            registry=self.registry,
        )

        # Capacity search metrics
        self.capacity_searches = Counter(
            'capacity_searches_total',
            'Capacity searches by result',
            ['phase', 'result'],
            registry=self.registry,
        )

        self.capacity_search_latency = Histogram(
            'capacity_search_latency_seconds',
            'Capacity search latency',
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
            registry=self.registry,
        )

        self.suggested_free_u = Gauge(
            'capacity_suggested_free_units',
            'Free units in the last suggested block',
            ['phase'],
            registry=self.registry,
        )

        self.suggested_headroom_kw = Gauge(
            'capacity_suggested_headroom_kw',
            'Power headroom of the last suggested block',
            ['phase'],
            registry=self.registry,
        )

        # Planning metrics
        self.move_plans = Counter(
            'move_plans_total',
            'Move plans by type and outcome',
            ['move_type', 'outcome'],
            registry=self.registry,
        )

        self.audit_findings = Gauge(
            'audit_findings',
            'Findings from the last facility audit',
            ['severity'],
            registry=self.registry,
        )

    def record_validation(self, result: ValidationResult) -> None:
        self.validations.labels(outcome="valid" if result.valid else "invalid").inc()
        conflicts = sum(1 for e in result.errors if e.startswith("Conflict with"))
        if conflicts:
            self.placement_conflicts.inc(conflicts)
        if result.warnings:
            self.placement_warnings.inc(len(result.warnings))

    def record_slot_query(self) -> None:
        self.slot_queries.inc()

    def record_capacity_search(
        self,
        phase: str,
        suggestion: Optional[CapacitySuggestion],
        duration_seconds: float,
    ) -> None:
        self.capacity_search_latency.observe(duration_seconds)
        if suggestion is None:
            self.capacity_searches.labels(phase=phase, result="empty").inc()
            return
        self.capacity_searches.labels(phase=phase, result="found").inc()
        self.suggested_free_u.labels(phase=phase).set(suggestion.total_free_u)
        self.suggested_headroom_kw.labels(phase=phase).set(suggestion.total_power_headroom_kw)

    def record_move_plan(self, move_type: str, accepted: bool) -> None:
        self.move_plans.labels(
            move_type=move_type,
            outcome="accepted" if accepted else "rejected",
        ).inc()

    def record_audit(self, report: AuditReport) -> None:
        for severity in FindingSeverity:
            self.audit_findings.labels(severity=severity.value).set(report.count(severity))

    def serve(self, port: int) -> None:
        """Expose the registry over HTTP."""
        start_http_server(port, registry=self.registry)
