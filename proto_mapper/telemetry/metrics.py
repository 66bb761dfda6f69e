"""
OpenTelemetry Metrics Collection

Every mapper operation is reported as one count (by operation and outcome)
and one latency sample. Without a configured MeterProvider the OpenTelemetry
API records nothing.
"""

import logging
import threading
from typing import NamedTuple, Optional

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    PeriodicExportingMetricReader
)
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

logger = logging.getLogger(__name__)

OPERATIONS_COUNTER = "proto_mapper.operations"
LATENCY_HISTOGRAM = "proto_mapper.operation.latency"


class _Instruments(NamedTuple):
    operations: metrics.Counter
    latency: metrics.Histogram


_instruments: Optional[_Instruments] = None
_lock = threading.Lock()


def setup_metrics(service_name: str, otlp_endpoint: str = "localhost:4317",
                  export_interval_ms: int = 5000, console: bool = False):
    """Configure OpenTelemetry metrics collection

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
        export_interval_ms: Metrics export interval in milliseconds
        console: Also print metrics to stdout (for development debugging)
    """
    readers = [
        PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=otlp_endpoint),
            export_interval_millis=export_interval_ms
        )
    ]

    if console:
        readers.append(PeriodicExportingMetricReader(
            ConsoleMetricExporter(),
            export_interval_millis=export_interval_ms
        ))

    provider = MeterProvider(metric_readers=readers)
    metrics.set_meter_provider(provider)

    logger.info(f"OpenTelemetry metrics configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return metrics.get_meter(service_name)


def _get_instruments() -> _Instruments:
    global _instruments
    if _instruments is None:
        with _lock:
            if _instruments is None:
                meter = metrics.get_meter("proto_mapper")
                _instruments = _Instruments(
                    operations=meter.create_counter(
                        name=OPERATIONS_COUNTER,
                        description="Mapper operations by outcome",
                        unit="1",
                    ),
                    latency=meter.create_histogram(
                        name=LATENCY_HISTOGRAM,
                        description="Mapper operation latency",
                        unit="ms",
                    ),
                )
    return _instruments


def record_operation(operation: str, outcome: str, latency_ms: float):
    """Record one finished mapper operation

    Args:
        operation: Operation name, e.g. "json_to_proto"
        outcome: "ok" or the name of the exception raised
        latency_ms: Wall-clock duration in milliseconds
    """
    instruments = _get_instruments()
    instruments.latency.record(latency_ms, {"operation": operation})
    instruments.operations.add(1, {"operation": operation, "outcome": outcome})
