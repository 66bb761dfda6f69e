"""
OpenTelemetry Integration Module

Provides tracing and metrics collection for mapper operations:
- tracer: Tracer setup and span creation
- metrics: Operation counts and latencies
"""

from .tracer import setup_tracer, create_span
from .metrics import setup_metrics, record_operation

__all__ = [
    "setup_tracer",
    "create_span",
    "setup_metrics",
    "record_operation"
]
