"""Industry insight API route declarations."""

from __future__ import annotations

import threading
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from career_insights.dependencies import get_db, get_refresh_cancel_event, get_refresh_job
from career_insights.models.industry_insight_model import DemandLevel, MarketOutlook
from career_insights.scheduler import run_scheduled_refresh
from career_insights.services.insight_refresh_service import InsightRefreshJob
from career_insights.services.insight_repository import get_insight, list_insights

router = APIRouter(prefix="/insights", tags=["insights"])


class SalaryRangeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: str
    min: float
    max: float
    median: float
    location: str


class InsightSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    industry: str
    growth_rate: float | None = None
    demand_level: DemandLevel | None = None
    market_outlook: MarketOutlook | None = None
    last_updated: datetime | None = None
    next_update: datetime | None = None


class InsightDetailOut(InsightSummaryOut):
    top_skills: list[str] = []
    key_trends: list[str] = []
    recommended_skills: list[str] = []
    salary_ranges: list[SalaryRangeOut] = []


@router.get("", summary="List stored industry insights")
def insights(db: Session = Depends(get_db)) -> dict:
    rows = [InsightSummaryOut.model_validate(row) for row in list_insights(db)]
    return {"insights": rows, "count": len(rows)}


@router.get("/{industry}", summary="Industry insight with salary ranges", response_model=InsightDetailOut)
def insight_detail(industry: str, db: Session = Depends(get_db)) -> InsightDetailOut:
    row = get_insight(db, industry)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No insights for industry '{industry}'")
    return InsightDetailOut.model_validate(row)


@router.post("/refresh", status_code=status.HTTP_202_ACCEPTED, summary="Trigger a refresh cycle")
def trigger_refresh(
    background_tasks: BackgroundTasks,
    job: InsightRefreshJob = Depends(get_refresh_job),
    cancel_event: threading.Event = Depends(get_refresh_cancel_event),
) -> dict[str, str]:
    """Queue a full refresh cycle outside the weekly schedule; 409 while one is running."""
    if job.is_running:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An insight refresh is already running")
    background_tasks.add_task(run_scheduled_refresh, job, cancel_event)
    return {"status": "accepted"}
