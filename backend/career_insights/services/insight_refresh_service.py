"""Weekly refresh of AI-generated industry insights.

A run lists tracked industries, then refreshes each one independently:
render the prompt, call the text-generation service, clean and validate the
JSON reply, and replace the stored insight and salary ranges in one
transaction. A failing industry is recorded and logged without stopping the
others. A run can be resumed with its original ``started_at`` so industries
already committed during that run are skipped, and it can be cancelled
between industries through a ``threading.Event``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy.orm import Session, sessionmaker

from career_insights.services.insight_model_client import InsightModelError, InsightTextGenerator
from career_insights.services.insight_parser import InsightContractError, parse_insight_payload
from career_insights.services.insight_prompt import build_insight_prompt
from career_insights.services.insight_repository import InsightStoreError, apply_insight, list_industries


logger = logging.getLogger(__name__)

STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"
STATUS_PARTIAL = "partial"

ERROR_UPSTREAM = "upstream"
ERROR_CONTRACT = "contract"
ERROR_STORAGE = "storage"
ERROR_UNEXPECTED = "unexpected"


class RefreshInProgressError(RuntimeError):
	"""Raised when a refresh cycle is requested while another one is still running."""


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass
class IndustryRefreshOutcome:
	"""Result of refreshing a single industry."""

	industry: str
	status: str
	salary_range_count: int = 0
	error_type: str | None = None
	error: str | None = None


@dataclass
class RefreshRunResult:
	"""Aggregate result of one refresh cycle."""

	started_at: datetime
	finished_at: datetime | None = None
	skipped: list[str] = field(default_factory=list)
	outcomes: list[IndustryRefreshOutcome] = field(default_factory=list)

	@property
	def succeeded(self) -> list[str]:
		return [item.industry for item in self.outcomes if item.status == STATUS_SUCCEEDED]

	@property
	def failed(self) -> list[IndustryRefreshOutcome]:
		return [item for item in self.outcomes if item.status == STATUS_FAILED]

	@property
	def cancelled(self) -> list[str]:
		return [item.industry for item in self.outcomes if item.status == STATUS_CANCELLED]

	@property
	def status(self) -> str:
		"""Run-level status: succeeded, partial, failed, or cancelled."""
		if self.failed:
			return STATUS_FAILED if not self.succeeded else STATUS_PARTIAL
		if self.cancelled:
			return STATUS_CANCELLED
		return STATUS_SUCCEEDED


class InsightRefreshJob:
	"""Refreshes stored industry insights from the text-generation service."""

	def __init__(
		self,
		session_factory: sessionmaker[Session],
		generator: InsightTextGenerator,
		max_workers: int = 1,
		refresh_interval: timedelta = timedelta(days=7),
		clock: Callable[[], datetime] = _utcnow,
	) -> None:
		if max_workers < 1:
			raise ValueError("max_workers must be at least 1.")
		self.session_factory = session_factory
		self.generator = generator
		self.max_workers = max_workers
		self.refresh_interval = refresh_interval
		self.clock = clock
		self._run_lock = threading.Lock()

	@property
	def is_running(self) -> bool:
		return self._run_lock.locked()

	def wait_until_idle(self, timeout: float) -> bool:
		"""Block until no cycle is running; returns False if ``timeout`` seconds pass first."""
		if not self._run_lock.acquire(timeout=timeout):
			return False
		self._run_lock.release()
		return True

	def refresh_industry(self, industry: str) -> IndustryRefreshOutcome:
		"""Generate, validate, and store fresh insights for one industry.

		Errors are returned as a failed outcome; the stored data for the industry
		is only replaced when every step succeeds.
		"""
		try:
			prompt = build_insight_prompt(industry)
			raw_text = self.generator.generate(prompt)
			payload = parse_insight_payload(raw_text, industry=industry)
			count = apply_insight(
				self.session_factory,
				industry,
				payload,
				now=self.clock(),
				interval=self.refresh_interval,
			)
		except InsightModelError as exc:
			logger.error("insight_refresh_upstream_error | industry=%s | error=%s", industry, exc)
			return IndustryRefreshOutcome(industry, STATUS_FAILED, error_type=ERROR_UPSTREAM, error=str(exc))
		except InsightContractError as exc:
			logger.error(
				"insight_refresh_contract_error | industry=%s | error=%s | raw_text=%r",
				industry,
				exc,
				exc.raw_text,
			)
			return IndustryRefreshOutcome(industry, STATUS_FAILED, error_type=ERROR_CONTRACT, error=str(exc))
		except InsightStoreError as exc:
			logger.error("insight_refresh_storage_error | industry=%s | error=%s", industry, exc)
			return IndustryRefreshOutcome(industry, STATUS_FAILED, error_type=ERROR_STORAGE, error=str(exc))
		except Exception as exc:
			logger.exception("insight_refresh_unexpected_error | industry=%r", industry)
			return IndustryRefreshOutcome(
				industry,
				STATUS_FAILED,
				error_type=ERROR_UNEXPECTED,
				error=f"{type(exc).__name__}: {exc}",
			)

		logger.info("insight_refresh_industry_complete | industry=%s | salary_ranges=%s", industry, count)
		return IndustryRefreshOutcome(industry, STATUS_SUCCEEDED, salary_range_count=count)

	def _refresh_unless_cancelled(self, industry: str, cancel_event: threading.Event) -> IndustryRefreshOutcome:
		if cancel_event.is_set():
			return IndustryRefreshOutcome(industry, STATUS_CANCELLED)
		return self.refresh_industry(industry)

	def run(
		self,
		started_at: datetime | None = None,
		cancel_event: threading.Event | None = None,
	) -> RefreshRunResult:
		"""Run one refresh cycle across all tracked industries.

		Pass the ``started_at`` of an interrupted run to resume it: industries
		updated at or after that instant are skipped. Listing industries is the
		only step whose failure aborts the run. Only one cycle runs at a time;
		a second request raises ``RefreshInProgressError`` instead of waiting.
		"""
		cancel_event = cancel_event or threading.Event()
		if not self._run_lock.acquire(blocking=False):
			logger.warning("insight_refresh_run_rejected | reason=already_running")
			raise RefreshInProgressError("An insight refresh cycle is already running.")
		try:
			resuming = started_at is not None
			result = RefreshRunResult(started_at=started_at or self.clock())

			industries = list_industries(self.session_factory)
			if resuming:
				pending = set(list_industries(self.session_factory, updated_before=result.started_at))
				result.skipped = [name for name in industries if name not in pending]
				industries = [name for name in industries if name in pending]

			logger.info(
				"insight_refresh_run_started | started_at=%s | industries=%s | skipped=%s | workers=%s",
				result.started_at.isoformat(),
				len(industries),
				len(result.skipped),
				self.max_workers,
			)

			if self.max_workers == 1:
				for industry in industries:
					result.outcomes.append(self._refresh_unless_cancelled(industry, cancel_event))
			else:
				with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="insight-refresh") as pool:
					futures = [
						pool.submit(self._refresh_unless_cancelled, industry, cancel_event) for industry in industries
					]
					result.outcomes.extend(future.result() for future in futures)

			result.finished_at = self.clock()
		finally:
			self._run_lock.release()

		logger.info(
			"insight_refresh_run_finished | status=%s | succeeded=%s | failed=%s | cancelled=%s | skipped=%s",
			result.status,
			len(result.succeeded),
			len(result.failed),
			len(result.cancelled),
			len(result.skipped),
		)
		for outcome in result.failed:
			logger.warning(
				"insight_refresh_industry_failed | industry=%s | error_type=%s | error=%s",
				outcome.industry,
				outcome.error_type,
				outcome.error,
			)
		return result
