"""Sanitization and schema validation of model-generated industry insights."""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from career_insights.models.industry_insight_model import DemandLevel, MarketOutlook


_LEADING_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?```\s*$")

# Older prompts advertised this misspelling, so models still echo it back.
_DEMAND_LEVEL_ALIASES = {"MEDUIM": "MEDIUM"}


class InsightContractError(ValueError):
	"""Raised when model output is not JSON or does not match the insight schema."""

	def __init__(self, message: str, industry: str = "", raw_text: str = "") -> None:
		super().__init__(message)
		self.industry = industry
		self.raw_text = raw_text


class SalaryRangePayload(BaseModel):
	model_config = ConfigDict(extra="ignore")

	role: str = Field(min_length=1)
	min: float
	max: float
	median: float
	location: str


class IndustryInsightPayload(BaseModel):
	"""Validated shape of the JSON object the insight prompt asks for."""

	model_config = ConfigDict(extra="ignore", populate_by_name=True)

	salary_ranges: list[SalaryRangePayload] = Field(alias="salaryRanges", min_length=1)
	growth_rate: float = Field(alias="growthRate")
	demand_level: DemandLevel = Field(alias="demandLevel")
	top_skills: list[str] = Field(alias="topSkills")
	market_outlook: MarketOutlook = Field(alias="marketOutlook")
	key_trends: list[str] = Field(alias="keyTrends")
	recommended_skills: list[str] = Field(alias="recommendedSkills")

	@field_validator("demand_level", mode="before")
	@classmethod
	def normalize_demand_level(cls, value: Any) -> Any:
		"""Accept any letter case and the legacy MEDUIM spelling."""
		if isinstance(value, str):
			normalized = value.strip().upper()
			return _DEMAND_LEVEL_ALIASES.get(normalized, normalized)
		return value

	@field_validator("market_outlook", mode="before")
	@classmethod
	def normalize_market_outlook(cls, value: Any) -> Any:
		if isinstance(value, str):
			return value.strip().upper()
		return value


def clean_model_text(text: str) -> str:
	"""Strip a surrounding Markdown code fence and whitespace from model output.

	Best effort only: a leading fence (optionally tagged ``json``) and a trailing
	fence are removed. Text without a fence is only trimmed, so cleaning is
	idempotent.
	"""
	cleaned = (text or "").strip()
	cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
	cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
	return cleaned.strip()


def parse_insight_payload(text: str, industry: str = "") -> IndustryInsightPayload:
	"""Clean, decode, and validate a raw model response for one industry."""
	cleaned = clean_model_text(text)
	if not cleaned:
		raise InsightContractError("Model returned an empty response.", industry=industry, raw_text=text)

	try:
		decoded = json.loads(cleaned)
	except json.JSONDecodeError as exc:
		raise InsightContractError(
			f"Model response is not valid JSON: {exc.msg} at position {exc.pos}.",
			industry=industry,
			raw_text=text,
		) from exc

	try:
		return IndustryInsightPayload.model_validate(decoded)
	except ValidationError as exc:
		raise InsightContractError(
			f"Model response does not match the insight schema: {exc.error_count()} error(s).",
			industry=industry,
			raw_text=text,
		) from exc
