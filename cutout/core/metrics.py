"""
Prometheus Metrics for Observability

Tracks pipeline stage latency, downstream API calls and invocation outcomes.
Exposes /api/v1/metrics endpoint for Prometheus scraping.
"""

import time
from contextlib import contextmanager

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY
)

# =============================================================================
# Metrics Definitions
# =============================================================================

# Pipeline Latency - Per Stage
pipeline_latency_seconds = Histogram(
    "pipeline_latency_seconds",
    "Time spent in each pipeline stage",
    labelnames=["stage", "status"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0]
)

# Total Pipeline Duration
pipeline_total_duration = Histogram(
    "pipeline_total_duration_seconds",
    "Total time for complete pipeline execution",
    labelnames=["status"],
    buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0]
)

# Downstream API Calls (ideogram, freepik, download)
external_api_calls_total = Counter(
    "external_api_calls_total",
    "Total number of downstream API calls",
    labelnames=["service", "status", "http_status"]
)

# Images that completed the full post-processing sequence
images_processed_total = Counter(
    "images_processed_total",
    "Total number of images generated, cut out and stored"
)

# Invocation outcomes
invocations_total = Counter(
    "cutout_invocations_total",
    "Total number of pipeline invocations",
    labelnames=["status_code"]
)

# API Request Metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    labelnames=["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

# Application Info
app_info = Info(
    "cutout_app",
    "Application information"
)


# =============================================================================
# Helper Functions
# =============================================================================

def set_app_info(version: str, environment: str):
    """Set application info metric."""
    app_info.info({
        "version": version,
        "environment": environment
    })


@contextmanager
def track_stage_latency(stage: str):
    """
    Context manager to track stage latency.

    Usage:
        with track_stage_latency("generation"):
            # do work
    """
    start = time.time()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.time() - start
        pipeline_latency_seconds.labels(stage=stage, status=status).observe(duration)


def record_external_call(service: str, status: str, http_status: int = 0):
    """Record a downstream API call. http_status is 0 when no response arrived."""
    external_api_calls_total.labels(
        service=service,
        status=status,
        http_status=str(http_status)
    ).inc()


def record_invocation(status_code: int, duration_seconds: float):
    """Record the outcome of one pipeline invocation."""
    invocations_total.labels(status_code=str(status_code)).inc()
    status = "success" if status_code == 200 else "error"
    pipeline_total_duration.labels(status=status).observe(duration_seconds)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
