"""
Background Jobs Module
======================

Runs the ingestion pipeline in-process or as an arq task, with Redis as
the job queue backend. The pipeline is idempotent, so a scheduled
re-crawl only refreshes existing rows.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from arq import create_pool, cron
from arq.connections import RedisSettings

from vn_admin.core.errors import PipelineError
from vn_admin.core.settings import Settings, get_settings
from vn_admin.db.engine import get_session, init_db
from vn_admin.db.repositories import AdminRepository
from vn_admin.ingestion.fetcher import Fetcher
from vn_admin.ingestion.pipeline import IngestionPipeline, IngestionReport, RunStatus
from vn_admin.ingestion.source import get_default_source_config

logger = logging.getLogger(__name__)


def get_redis_settings() -> RedisSettings:
    """Get Redis connection settings from environment."""
    redis_url = os.environ.get("REDIS_URL")
    if redis_url:
        return RedisSettings.from_dsn(redis_url)
    return RedisSettings(
        host=os.environ.get("REDIS_HOST", "localhost"),
        port=int(os.environ.get("REDIS_PORT", "6379")),
        database=int(os.environ.get("REDIS_DB", "0")),
    )


async def run_ingestion(
    cancel_event: asyncio.Event | None = None,
    settings: Settings | None = None,
) -> IngestionReport:
    """
    Build the pipeline from settings and run it once.

    Raises:
        PipelineError: If the province list could not be fetched.
        IngestionCancelled: If ``cancel_event`` was set.
    """
    settings = settings or get_settings()
    source = get_default_source_config(settings.source_config)
    if not settings.api_cookie:
        logger.warning("API_COOKIE is not set; the remote source may reject requests")

    init_db(settings.database_url)
    fetcher = Fetcher(cookie=settings.api_cookie, source=source)
    with get_session(settings.database_url) as session:
        pipeline = IngestionPipeline(fetcher, AdminRepository(session), source)
        return await pipeline.run(cancel_event)


async def crawl_provinces(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    arq task: run one ingestion.

    Returns:
        IngestionReport as dictionary
    """
    job_id = ctx.get("job_id", "local")
    logger.info(f"Ingestion job {job_id} started")
    try:
        report = await run_ingestion()
    except PipelineError as e:
        logger.error(f"Ingestion job {job_id} failed: {e}")
        report = IngestionReport(errors=[str(e)])
        report.finish(RunStatus.FAILED)
    return report.to_dict()


async def enqueue_crawl() -> str:
    """
    Enqueue an ingestion job for the worker.

    Returns:
        Job ID
    """
    redis = await create_pool(get_redis_settings())
    try:
        job = await redis.enqueue_job("crawl_provinces")
    finally:
        await redis.close()
    if job is None:
        raise RuntimeError("an ingestion job with the same id is already queued")
    return job.job_id


async def get_job_status(job_id: str) -> dict[str, Any] | None:
    """
    Get the status of an ingestion job.

    Args:
        job_id: Job ID to look up

    Returns:
        Job info dict, or None if not found
    """
    from arq.jobs import Job, JobStatus

    redis = await create_pool(get_redis_settings())
    try:
        job = Job(job_id, redis)
        status = await job.status()
        if status == JobStatus.not_found:
            return None
        info = await job.result_info()
    finally:
        await redis.close()

    return {
        "job_id": job_id,
        "status": status.value,
        "result": info.result if info else None,
    }


def get_cron_jobs() -> list:
    """Nightly re-crawl when CRAWL_CRON_HOUR is set (0-23)."""
    hour = os.environ.get("CRAWL_CRON_HOUR")
    if not hour:
        return []
    return [cron(crawl_provinces, hour={int(hour)}, minute={0}, unique=True)]


class WorkerSettings:
    """arq worker settings."""

    functions = [crawl_provinces]
    cron_jobs = get_cron_jobs()
    redis_settings = get_redis_settings()
    max_jobs = 1
    job_timeout = 3600  # 1 hour
    keep_result = 86400  # 24 hours
