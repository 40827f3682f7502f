import logging
from datetime import datetime, timedelta
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.jobstores.memory import MemoryJobStore

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(
    jobstores={"default": MemoryJobStore()},
    job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 5},
)

TOKEN_CLEANUP_JOB_ID = "token_blacklist_cleanup"
SESSION_STATE_JOB_ID = "session_state_cleanup"


def schedule_once(delay_seconds: float, callback: Callable[[], None]) -> None:
    """Run `callback` once, `delay_seconds` from now."""
    scheduler.add_job(
        callback,
        "date",
        run_date=datetime.now() + timedelta(seconds=delay_seconds),
    )


def _cleanup_expired_tokens():
    from app.core.database import SessionLocal
    from app.core.security import cleanup_expired_tokens

    db = SessionLocal()
    try:
        removed = cleanup_expired_tokens(db)
        if removed:
            logger.info(f"Removed {removed} expired session tokens from blacklist")
    except Exception as e:
        logger.error(f"Token blacklist cleanup failed: {e}")
    finally:
        db.close()


def prune_session_state() -> tuple[int, int]:
    """Drop admin workspaces of expired sessions and theme controllers nobody uses."""
    from app.panels.workspace import workspace_registry
    from app.services.theme_service import theme_registry

    workspaces = workspace_registry.prune_expired()
    controllers = theme_registry.prune()
    if workspaces or controllers:
        logger.info(f"Pruned {workspaces} expired admin workspaces and {controllers} idle theme controllers")
    return workspaces, controllers


def start_scheduler():
    """Start the scheduler and register housekeeping jobs."""
    scheduler.add_job(
        _cleanup_expired_tokens,
        "interval",
        hours=1,
        id=TOKEN_CLEANUP_JOB_ID,
        replace_existing=True,
    )
    scheduler.add_job(
        prune_session_state,
        "interval",
        hours=1,
        id=SESSION_STATE_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("APScheduler started")


def shutdown_scheduler():
    """Gracefully shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("APScheduler shut down")
