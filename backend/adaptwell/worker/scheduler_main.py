"""Dedicated APScheduler worker process."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from adaptwell.core.config import settings
from adaptwell.core.logging import configure_logging
from adaptwell.db.session import SessionLocal
from adaptwell.services.job_runner import (
    run_cognitive_cycle_for_all_users,
    run_reflection_for_all_users,
)


logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running cognitive cycle once on startup")
            run_cycle_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_cycle_job,
        trigger="cron",
        hour=settings.cycle_job_hour,
        minute=settings.cycle_job_minute,
        id="cognitive_cycle_job",
        replace_existing=True,
    )
    scheduler.add_job(
        run_reflection_job,
        trigger="cron",
        day_of_week=str(settings.reflection_job_day),
        hour=settings.reflection_job_hour,
        minute=0,
        id="reflection_job",
        replace_existing=True,
    )
    logger.info(
        "Registered scheduler jobs (cycle daily %02d:%02d, reflection day=%s %02d:00 %s)",
        settings.cycle_job_hour,
        settings.cycle_job_minute,
        settings.reflection_job_day,
        settings.reflection_job_hour,
        settings.scheduler_timezone,
    )


def run_cycle_job() -> None:
    session = SessionLocal()
    try:
        result = run_cognitive_cycle_for_all_users(session)
        logger.info(
            "Cognitive cycle job complete: users=%s, proposed=%s, applied=%s, failures=%s",
            result.users_processed,
            result.adaptations_proposed,
            result.adaptations_applied,
            result.failures,
        )
    except Exception:
        logger.exception("Cognitive cycle job failed")
    finally:
        session.close()


def run_reflection_job() -> None:
    session = SessionLocal()
    try:
        result = run_reflection_for_all_users(session)
        logger.info(
            "Reflection job complete: users=%s, reflections=%s, failures=%s",
            result.users_processed,
            result.reflections_written,
            result.failures,
        )
    except Exception:
        logger.exception("Reflection job failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
