"""OpenTelemetry exporter – pushes process counters via OTLP/HTTP."""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from ..collector.base import MetricSample
from ..config import OtelExporterConfig
from .base import BaseExporter

logger = logging.getLogger(__name__)


def gauge_name(sample_name: str, field_name: str) -> str:
    """Return the instrument name for one field of a sample."""
    return f"{sample_name}.{field_name}"


class OtelExporter(BaseExporter):
    """Exports process counters to an OpenTelemetry endpoint.

    Every field of a sample becomes its own gauge (``processes.running``,
    ``processes.total`` ...).  The SDK's ``PeriodicExportingMetricReader``
    flushes them to the configured OTLP/HTTP endpoint.  Pass *reader* to
    swap the periodic OTLP reader for another one.
    """

    def __init__(self, config: OtelExporterConfig, reader: MetricReader | None = None) -> None:
        self._config = config
        resource = Resource.create({SERVICE_NAME: config.service_name})

        if reader is None:
            exporter_kwargs: dict[str, Any] = {
                "endpoint": f"{config.endpoint.rstrip('/')}/v1/metrics",
            }
            if config.headers:
                exporter_kwargs["headers"] = config.headers

            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(**exporter_kwargs),
                export_interval_millis=config.export_interval_ms,
            )
        self._provider = MeterProvider(resource=resource, metric_readers=[reader])
        self._meter = self._provider.get_meter("proc_census.processes")
        self._gauges: dict[str, Any] = {}

        logger.info(
            "OtelExporter initialized → %s (service=%s)",
            config.endpoint,
            config.service_name,
        )

    def install_global(self) -> None:
        """Make this exporter's meter provider the process-wide default."""
        metrics.set_meter_provider(self._provider)

    def _get_gauge(self, name: str) -> Any:
        if name not in self._gauges:
            self._gauges[name] = self._meter.create_gauge(
                name=name,
                unit="1",
                description=f"Process count: {name}",
            )
        return self._gauges[name]

    def export(self, samples: list[MetricSample]) -> None:
        for s in samples:
            for field_name, value in s.fields.items():
                gauge = self._get_gauge(gauge_name(s.name, field_name))
                gauge.set(value, attributes=s.tags)

    def shutdown(self) -> None:
        self._provider.shutdown()
        logger.info("OtelExporter shut down")
