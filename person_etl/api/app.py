"""
HTTP trigger for the import persons job.

    POST /jobs/import-persons   run the job, 200 on COMPLETED, 500 on FAILED
    GET  /health                liveness
    GET  /metrics               Prometheus metrics
"""

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from person_etl.batch.job import ImportPersonsJob
from person_etl.config import PipelineSettings, load_settings
from person_etl.observability.logger import get_logger
from person_etl.observability.metrics import generate_metrics, get_content_type
from person_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)

JobFactory = Callable[[], ImportPersonsJob]


def create_app(
    job_factory: JobFactory | None = None,
    settings: PipelineSettings | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        job_factory: Builds the job for each trigger call. When omitted, a
            database pool is opened for the application's lifetime and jobs
            are wired from ``settings``.
        settings: Pipeline settings (resolved with load_settings() when omitted)

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if job_factory is not None:
            app.state.job_factory = job_factory
            yield
            return

        resolved = settings or load_settings()
        pool = DatabaseConnectionPool.from_settings(resolved.database)
        pool.open()
        app.state.job_factory = lambda: ImportPersonsJob.from_settings(resolved, pool)
        try:
            yield
        finally:
            pool.close()

    app = FastAPI(title="person-etl", lifespan=lifespan)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": "person-etl"}

    @app.post("/jobs/import-persons")
    def import_persons(request: Request):
        job = request.app.state.job_factory()
        client = request.client.host if request.client else None
        logger.info("Import triggered over HTTP", extra={"client": client})
        result = job.launch()
        status_code = 200 if result.succeeded else 500
        return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_metrics(), media_type=get_content_type())

    return app
