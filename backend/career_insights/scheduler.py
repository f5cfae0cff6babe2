"""Cron scheduling for the weekly industry insight refresh."""

from __future__ import annotations

import logging
import threading

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from career_insights.config import Settings
from career_insights.services.insight_refresh_service import InsightRefreshJob, RefreshInProgressError


logger = logging.getLogger(__name__)

INSIGHT_REFRESH_JOB_ID = "generate-industry-insights"


def run_scheduled_refresh(job: InsightRefreshJob, cancel_event: threading.Event | None = None) -> None:
	"""Entry point invoked by the scheduler; a failed run is retried at the next fire."""
	try:
		job.run(cancel_event=cancel_event)
	except RefreshInProgressError:
		logger.info("insight_refresh_run_skipped | job_id=%s | reason=already_running", INSIGHT_REFRESH_JOB_ID)
	except Exception:
		logger.exception("insight_refresh_run_aborted | job_id=%s", INSIGHT_REFRESH_JOB_ID)


def build_insight_scheduler(
	job: InsightRefreshJob,
	settings: Settings,
	cancel_event: threading.Event | None = None,
) -> AsyncIOScheduler:
	"""Create a scheduler with the weekly refresh job registered but not started.

	Defaults fire every Sunday at 00:00, the ``0 0 * * 0`` crontab.
	"""
	scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)
	scheduler.add_job(
		run_scheduled_refresh,
		"cron",
		day_of_week=settings.insight_refresh_day_of_week,
		hour=settings.insight_refresh_hour,
		minute=settings.insight_refresh_minute,
		args=[job, cancel_event],
		id=INSIGHT_REFRESH_JOB_ID,
		name="Generate Industry Insights",
		coalesce=True,
		max_instances=1,
		replace_existing=True,
	)
	logger.info(
		"insight_refresh_scheduled | day_of_week=%s | hour=%s | minute=%s | timezone=%s",
		settings.insight_refresh_day_of_week,
		settings.insight_refresh_hour,
		settings.insight_refresh_minute,
		settings.scheduler_timezone,
	)
	return scheduler
