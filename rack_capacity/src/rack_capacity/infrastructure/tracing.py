"""OpenTelemetry tracing configuration for the rack capacity engine."""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter

from rack_capacity import __version__
from rack_capacity.infrastructure.config import ObservabilityConfig

TRACER_NAME = "rack_capacity"


def setup_tracing(config: ObservabilityConfig) -> trace.Tracer:
    """Install a tracer provider when tracing is enabled.

    Coordinator spans go to the OTLP collector if an endpoint is set,
    otherwise to the console. With tracing disabled the global no-op
    provider stays in place and spans cost nothing.
    """
    if not config.tracing_enabled:
        return get_tracer()

    resource = Resource.create(
        {
            SERVICE_NAME: TRACER_NAME,
            SERVICE_VERSION: __version__,
            "deployment.environment": config.environment,
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(_span_exporter(config)))
    trace.set_tracer_provider(provider)

    return get_tracer()


def _span_exporter(config: ObservabilityConfig) -> SpanExporter:
    if config.otlp_endpoint:
        return OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=True)
    return ConsoleSpanExporter()


def get_tracer(name: str = TRACER_NAME) -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)
