"""Shared dependency providers and injectable backend application dependencies."""

from __future__ import annotations

import threading
from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from career_insights.database import iter_session
from career_insights.services.insight_refresh_service import InsightRefreshJob


def get_db(request: Request) -> Generator[Session, None, None]:
	"""Expose a session from the application-owned factory for route handlers."""
	yield from iter_session(request.app.state.session_factory)


def get_refresh_job(request: Request) -> InsightRefreshJob:
	return request.app.state.refresh_job


def get_refresh_cancel_event(request: Request) -> threading.Event:
	return request.app.state.refresh_cancel_event
