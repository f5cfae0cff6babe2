"""Persistence models for per-industry market insights and salary bands."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Enum, Float, ForeignKey, String, TypeDecorator, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from career_insights.database import Base


class UTCDateTime(TypeDecorator):
	"""Timezone-aware UTC datetimes on every backend.

	SQLite stores ``DateTime(timezone=True)`` values without an offset, so values
	are converted to UTC on write and tagged as UTC on read.
	"""

	impl = DateTime(timezone=True)
	cache_ok = True

	def process_bind_param(self, value, dialect):
		if value is None:
			return None
		if value.tzinfo is None:
			return value.replace(tzinfo=timezone.utc)
		return value.astimezone(timezone.utc)

	def process_result_value(self, value, dialect):
		if value is None:
			return None
		if value.tzinfo is None:
			return value.replace(tzinfo=timezone.utc)
		return value.astimezone(timezone.utc)


class DemandLevel(str, enum.Enum):
	"""Labor demand within an industry."""

	HIGH = "HIGH"
	MEDIUM = "MEDIUM"
	LOW = "LOW"


class MarketOutlook(str, enum.Enum):
	"""Economic trajectory of an industry."""

	POSITIVE = "POSITIVE"
	NEUTRAL = "NEUTRAL"
	NEGATIVE = "NEGATIVE"


class IndustryInsight(Base):
	"""Aggregate market data for one tracked industry, keyed by industry name."""

	__tablename__ = "industry_insights"

	id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
	industry: Mapped[str] = mapped_column(String(160), nullable=False, unique=True, index=True)
	growth_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
	demand_level: Mapped[DemandLevel | None] = mapped_column(
		Enum(DemandLevel, name="demand_level"), nullable=True
	)
	top_skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
	market_outlook: Mapped[MarketOutlook | None] = mapped_column(
		Enum(MarketOutlook, name="market_outlook"), nullable=True
	)
	key_trends: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
	recommended_skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
	last_updated: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True, index=True)
	next_update: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

	salary_ranges: Mapped[list["SalaryRange"]] = relationship(
		"SalaryRange",
		back_populates="industry_insight",
		cascade="all, delete-orphan",
		order_by="SalaryRange.role",
	)


class SalaryRange(Base):
	"""Compensation band for one role within an industry."""

	__tablename__ = "salary_ranges"

	id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
	industry_insight_id: Mapped[uuid.UUID] = mapped_column(
		Uuid,
		ForeignKey("industry_insights.id", ondelete="CASCADE"),
		nullable=False,
		index=True,
	)
	role: Mapped[str] = mapped_column(String(200), nullable=False)
	min: Mapped[float] = mapped_column(Float, nullable=False)
	max: Mapped[float] = mapped_column(Float, nullable=False)
	median: Mapped[float] = mapped_column(Float, nullable=False)
	location: Mapped[str] = mapped_column(String(200), nullable=False)

	industry_insight: Mapped["IndustryInsight"] = relationship("IndustryInsight", back_populates="salary_ranges")
