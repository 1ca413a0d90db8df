"""
ARQ Worker Configuration

Background job processing with Redis-backed task queue.
Runs the expired chat image sweep on an hourly schedule.

Run with:
    arq faculty_portal.worker.WorkerSettings
"""

import logging
from datetime import datetime
from typing import Any

from arq import cron
from arq.connections import RedisSettings

from .config import settings
from .services.image_sweep_service import sweep_expired_images
from .services.minio_service import minio_service

logger = logging.getLogger(__name__)


# Format: redis://host:port/db or redis://:password@host:port/db
def parse_redis_url(url: str) -> RedisSettings:
    """Parse Redis URL into ARQ RedisSettings."""
    from urllib.parse import urlparse

    parsed = urlparse(url)
    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        password=parsed.password,
        database=int(parsed.path.lstrip("/") or 0),
    )


# =============================================================================
# Image Sweep Job
# =============================================================================

async def clear_expired_images(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Clear expired chat images.

    Returns:
        dict with the number of cleared images and storage errors
    """
    logger.info("Running scheduled image sweep...")

    result = {"cleared": 0, "storage_errors": 0}
    try:
        result = await sweep_expired_images(
            session_factory=ctx.get("session_factory"),
            storage=ctx.get("storage"),
        )
    except Exception as e:
        logger.error(f"Error running image sweep: {e}", exc_info=True)

    return {**result, "run_at": datetime.utcnow().isoformat()}


# =============================================================================
# Startup/Shutdown Hooks
# =============================================================================

async def startup(ctx: dict[str, Any]) -> None:
    """Initialize resources when worker starts."""
    logger.info("ARQ worker starting up...")
    ctx["storage"] = minio_service


async def shutdown(ctx: dict[str, Any]) -> None:
    logger.info("ARQ worker shutting down...")


# =============================================================================
# Schedule Parsing
# =============================================================================

def parse_schedule_set(value: str) -> set[int]:
    """
    Parse a comma-separated string of integers into a set.

    Examples:
        "0" -> {0}
        "0,30" -> {0, 30}
    """
    return {int(x.strip()) for x in value.split(",") if x.strip()}


def build_image_sweep_cron():
    """Hourly image sweep at the configured minutes (default: top of the hour)."""
    minutes = parse_schedule_set(settings.arq_image_sweep_minutes) or {0}
    return cron(clear_expired_images, minute=minutes, second=0, run_at_startup=True)


# =============================================================================
# Worker Settings
# =============================================================================

class WorkerSettings:
    """ARQ worker configuration."""

    redis_settings = parse_redis_url(settings.redis_url)

    # Job functions that can be called via arq.enqueue_job()
    functions = [
        clear_expired_images,
    ]

    # ARQ_IMAGE_SWEEP_MINUTES: comma-separated minutes of each hour (default "0")
    cron_jobs = [
        build_image_sweep_cron(),
    ]

    on_startup = startup
    on_shutdown = shutdown

    # Worker behavior
    max_jobs = 10  # Max concurrent jobs
    job_timeout = 300  # 5 minutes max per job
    keep_result = 3600  # Keep results for 1 hour
