"""OpenTelemetry + Prometheus fallback wiring for the recap backend."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI

from recap import config

logger = logging.getLogger("recap.observability")

# (name, kind, unit, description, prometheus label names)
_METRICS: list[tuple[str, str, str, str, tuple[str, ...]]] = [
    ("recap_queries_total", "counter", "1", "Reconstruct queries by outcome", ("result",)),
    ("recap_query_latency_ms", "histogram", "ms", "Read-parse-reconstruct-analyze latency", ("result",)),
    ("recap_parser_skipped_lines_total", "counter", "1", "Malformed log lines skipped by the parser", ()),
    ("recap_interruptions_total", "counter", "1", "Interrupted sessions detected, by dangling shape", ("shape",)),
]

_initialized = False
_enabled = False
_prom_enabled = False
_tracer: Any | None = None
_providers: list[Any] = []
_fastapi_instrumentor: Any | None = None
_otel_instruments: dict[str, Any] = {}
_prom_instruments: dict[str, Any] = {}


def _signal_endpoint(base_endpoint: str, signal: str) -> str | None:
    """OTLP/HTTP exporters want the full per-signal URL, e.g. ``.../v1/traces``."""
    endpoint = (base_endpoint or "").strip().rstrip("/")
    if not endpoint:
        return None
    suffix = f"/v1/{signal}"
    if endpoint.endswith(suffix):
        return endpoint
    if endpoint.endswith("/v1"):
        endpoint = endpoint[: -len("/v1")]
    return endpoint + suffix


def _start_prometheus() -> None:
    global _prom_enabled
    try:
        from prometheus_client import Counter, Histogram, start_http_server

        start_http_server(config.PROM_PORT)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Prometheus fallback not started: %s", exc)
        return

    for name, kind, _unit, description, labels in _METRICS:
        factory = Counter if kind == "counter" else Histogram
        _prom_instruments[name] = factory(name, description, list(labels))
    _prom_enabled = True
    logger.info("Prometheus fallback metrics server listening on port %s", config.PROM_PORT)


def initialize(app: FastAPI | None = None) -> None:
    global _initialized, _enabled, _tracer, _fastapi_instrumentor

    if _initialized:
        if _enabled and app and _fastapi_instrumentor:
            _fastapi_instrumentor.instrument_app(app)
        return
    _initialized = True

    if not config.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled (RECAP_OTEL_ENABLED=false)")
        return

    try:
        from opentelemetry import metrics, trace
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
        from opentelemetry.sdk.metrics import MeterProvider
        from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError as exc:
        logger.warning("OpenTelemetry dependencies unavailable: %s", exc)
        return

    service_name = config.OTEL_SERVICE_NAME or "recap-backend"
    resource = Resource.create({"service.name": service_name, "service.namespace": "recap"})

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=_signal_endpoint(config.OTEL_ENDPOINT, "traces")))
    )
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=_signal_endpoint(config.OTEL_ENDPOINT, "metrics"))
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)

    meter = metrics.get_meter("recap")
    for name, kind, unit, description, _labels in _METRICS:
        create = meter.create_counter if kind == "counter" else meter.create_histogram
        _otel_instruments[name] = create(name, unit=unit, description=description)

    _providers.extend([meter_provider, tracer_provider])
    _tracer = trace.get_tracer("recap")
    _fastapi_instrumentor = FastAPIInstrumentor()
    _enabled = True
    if app:
        _fastapi_instrumentor.instrument_app(app)

    if config.PROM_PORT > 0:
        _start_prometheus()

    logger.info("OpenTelemetry initialized (service=%s endpoint=%s)", service_name, config.OTEL_ENDPOINT)


def shutdown(app: FastAPI | None = None) -> None:
    global _enabled
    if not _initialized:
        return
    try:
        if app and _fastapi_instrumentor:
            _fastapi_instrumentor.uninstrument_app(app)
    except Exception:
        logger.debug("FastAPI uninstrument failed", exc_info=True)
    for provider in _providers:
        try:
            provider.shutdown()
        except Exception:
            logger.debug("Telemetry provider shutdown failed", exc_info=True)
    _providers.clear()
    _enabled = False


@contextmanager
def start_span(name: str, attributes: dict[str, Any] | None = None):
    if not _enabled or _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        yield span


def _emit(name: str, value: float, labels: dict[str, str] | None = None) -> None:
    labels = labels or {}
    otel_instrument = _otel_instruments.get(name) if _enabled else None
    if otel_instrument is not None:
        if hasattr(otel_instrument, "add"):
            otel_instrument.add(value, labels)
        else:
            otel_instrument.record(value, labels)

    prom_instrument = _prom_instruments.get(name) if _prom_enabled else None
    if prom_instrument is not None:
        target = prom_instrument.labels(**labels) if labels else prom_instrument
        if hasattr(target, "inc"):
            target.inc(value)
        else:
            target.observe(value)


def record_query(result: str, duration_ms: float) -> None:
    labels = {"result": result or "unknown"}
    _emit("recap_queries_total", 1, labels)
    _emit("recap_query_latency_ms", max(0.0, float(duration_ms)), labels)


def record_skipped_lines(count: int) -> None:
    if count > 0:
        _emit("recap_parser_skipped_lines_total", int(count))


def record_interruption(shape: str) -> None:
    _emit("recap_interruptions_total", 1, {"shape": shape or "unknown"})
