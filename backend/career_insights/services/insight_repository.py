"""Persistence operations for industry insights and their salary ranges."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from career_insights.models.industry_insight_model import IndustryInsight, SalaryRange
from career_insights.services.insight_parser import IndustryInsightPayload


class InsightStoreError(RuntimeError):
	"""Raised when reading or writing insights fails; writes are rolled back."""


def list_industries(session_factory: sessionmaker[Session], updated_before: datetime | None = None) -> list[str]:
	"""Return tracked industry names, optionally only those not updated since ``updated_before``."""
	query = select(IndustryInsight.industry).order_by(IndustryInsight.industry.asc())
	if updated_before is not None:
		query = query.where(
			(IndustryInsight.last_updated.is_(None)) | (IndustryInsight.last_updated < updated_before)
		)
	try:
		with session_factory() as session:
			return list(session.execute(query).scalars().all())
	except SQLAlchemyError as exc:
		raise InsightStoreError(f"Failed to list industries: {exc}") from exc


def register_industries(session_factory: sessionmaker[Session], industries: Iterable[str]) -> list[str]:
	"""Insert bare insight rows for industry names that are not tracked yet."""
	names = sorted({name.strip() for name in industries if name and name.strip()})
	if not names:
		return []
	try:
		with session_factory.begin() as session:
			existing = set(
				session.execute(select(IndustryInsight.industry).where(IndustryInsight.industry.in_(names)))
				.scalars()
				.all()
			)
			created = [name for name in names if name not in existing]
			session.add_all([IndustryInsight(industry=name) for name in created])
		return created
	except SQLAlchemyError as exc:
		raise InsightStoreError(f"Failed to register industries: {exc}") from exc


def apply_insight(
	session_factory: sessionmaker[Session],
	industry: str,
	payload: IndustryInsightPayload,
	now: datetime,
	interval: timedelta = timedelta(days=7),
) -> int:
	"""Replace one industry's insight fields and salary ranges in a single transaction.

	Old salary ranges are deleted, the insight row is updated, and the new ranges
	are inserted before commit; any failure rolls the whole change back. Returns
	the number of salary ranges written.
	"""
	try:
		with session_factory.begin() as session:
			insight = session.execute(
				select(IndustryInsight).where(IndustryInsight.industry == industry).with_for_update()
			).scalar_one_or_none()
			if insight is None:
				raise InsightStoreError(f"Industry '{industry}' is not tracked.")

			session.execute(delete(SalaryRange).where(SalaryRange.industry_insight_id == insight.id))

			insight.growth_rate = payload.growth_rate
			insight.demand_level = payload.demand_level
			insight.top_skills = list(payload.top_skills)
			insight.market_outlook = payload.market_outlook
			insight.key_trends = list(payload.key_trends)
			insight.recommended_skills = list(payload.recommended_skills)
			insight.last_updated = now
			insight.next_update = now + interval

			session.add_all(
				[
					SalaryRange(
						industry_insight_id=insight.id,
						role=item.role,
						min=item.min,
						max=item.max,
						median=item.median,
						location=item.location,
					)
					for item in payload.salary_ranges
				]
			)
		return len(payload.salary_ranges)
	except SQLAlchemyError as exc:
		raise InsightStoreError(f"Failed to store insights for '{industry}': {exc}") from exc


def get_insight(session: Session, industry: str) -> IndustryInsight | None:
	query = (
		select(IndustryInsight)
		.where(IndustryInsight.industry == industry)
		.options(selectinload(IndustryInsight.salary_ranges))
	)
	return session.execute(query).scalar_one_or_none()


def list_insights(session: Session) -> list[IndustryInsight]:
	query = select(IndustryInsight).order_by(IndustryInsight.industry.asc())
	return list(session.execute(query).scalars().all())
