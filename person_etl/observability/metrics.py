"""
Prometheus metrics collection for person-etl

Counters and histograms for runs, chunks and records, kept on a private
registry and exposed by the HTTP API.
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()


# =======================
# RUN METRICS
# =======================

runs_total = Counter(
    name="person_etl_runs_total",
    documentation="Total number of pipeline runs by terminal status",
    labelnames=["job_name", "status"],  # status: COMPLETED, FAILED
    registry=REGISTRY,
)

run_duration_seconds = Histogram(
    name="person_etl_run_duration_seconds",
    documentation="Wall-clock duration of pipeline runs in seconds",
    labelnames=["job_name"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

# =======================
# RECORD METRICS
# =======================

records_total = Counter(
    name="person_etl_records_total",
    documentation="Total number of records handled by the pipeline",
    labelnames=["job_name", "stage"],  # stage: read, written, filtered
    registry=REGISTRY,
)

# =======================
# CHUNK METRICS
# =======================

chunks_total = Counter(
    name="person_etl_chunks_total",
    documentation="Total number of chunks by outcome",
    labelnames=["job_name", "status"],  # status: committed, failed
    registry=REGISTRY,
)

chunk_duration_seconds = Histogram(
    name="person_etl_chunk_duration_seconds",
    documentation="Time spent reading, processing and writing one chunk",
    labelnames=["job_name"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

# =======================
# ERROR METRICS
# =======================

errors_total = Counter(
    name="person_etl_errors_total",
    documentation="Total number of run-halting errors",
    labelnames=["job_name", "kind"],  # kind: resource, parse, validation, storage
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """Render the registry in Prometheus text format"""
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Content type of generate_metrics() output"""
    return CONTENT_TYPE_LATEST


def record_run(
    job_name: str,
    status: str,
    total_read: int,
    total_written: int,
    filter_count: int,
    duration_seconds: float,
) -> None:
    """
    Record the outcome of a finished run.

    Args:
        job_name: Job that ran
        status: Terminal status
        total_read: Records read
        total_written: Records written
        filter_count: Records filtered by the processor
        duration_seconds: Run duration in seconds
    """
    runs_total.labels(job_name=job_name, status=status).inc()
    run_duration_seconds.labels(job_name=job_name).observe(duration_seconds)
    records_total.labels(job_name=job_name, stage="read").inc(total_read)
    records_total.labels(job_name=job_name, stage="written").inc(total_written)
    if filter_count:
        records_total.labels(job_name=job_name, stage="filtered").inc(filter_count)


def record_chunk(job_name: str, committed: bool, duration_seconds: float | None = None) -> None:
    """Record one committed or failed chunk."""
    status = "committed" if committed else "failed"
    chunks_total.labels(job_name=job_name, status=status).inc()
    if duration_seconds is not None:
        chunk_duration_seconds.labels(job_name=job_name).observe(duration_seconds)


def record_error(job_name: str, kind: str) -> None:
    """Record a run-halting error."""
    errors_total.labels(job_name=job_name, kind=kind).inc()
