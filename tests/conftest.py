from __future__ import annotations

import json
import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("OPENAI_API_KEY", "sk-test-key-for-unit-tests")

from career_insights.config import Settings
from career_insights.database import build_engine, build_session_factory, init_db
from career_insights.services.insight_repository import register_industries


FIXED_NOW = datetime(2025, 1, 5, 0, 0, tzinfo=timezone.utc)


def make_insight_payload(**overrides) -> dict:
	payload = {
		"salaryRanges": [
			{"role": "Software Engineer", "min": 90000, "max": 160000, "median": 120000, "location": "US"},
			{"role": "Data Engineer", "min": 95000, "max": 155000, "median": 125000, "location": "US"},
			{"role": "DevOps Engineer", "min": 85000, "max": 150000, "median": 115000, "location": "US"},
			{"role": "Product Manager", "min": 100000, "max": 170000, "median": 135000, "location": "US"},
			{"role": "QA Engineer", "min": 70000, "max": 120000, "median": 90000, "location": "US"},
		],
		"growthRate": 12.5,
		"demandLevel": "HIGH",
		"topSkills": ["Python", "Cloud", "Kubernetes", "SQL", "Machine Learning"],
		"marketOutlook": "POSITIVE",
		"keyTrends": ["AI adoption", "Remote work", "Platform teams", "Security", "Automation"],
		"recommendedSkills": ["LLM tooling", "Go", "Terraform"],
	}
	payload.update(overrides)
	return payload


class FakeGenerator:
	"""Returns canned responses per industry and records prompts."""

	def __init__(self, responses: dict[str, object] | None = None, default: object | None = None) -> None:
		self.responses = responses or {}
		self.default = default
		self.prompts: list[str] = []

	def generate(self, prompt: str) -> str:
		self.prompts.append(prompt)
		for industry, response in self.responses.items():
			if f"the {industry} industry" in prompt:
				return self._render(response)
		return self._render(self.default if self.default is not None else make_insight_payload())

	@staticmethod
	def _render(response: object) -> str:
		if isinstance(response, Exception):
			raise response
		if isinstance(response, str):
			return response
		return json.dumps(response)


@pytest.fixture
def engine(tmp_path):
	engine = build_engine(f"sqlite:///{tmp_path / 'insights.db'}")
	init_db(engine)
	yield engine
	engine.dispose()


@pytest.fixture
def session_factory(engine):
	return build_session_factory(engine)


@pytest.fixture
def tracked_industries(session_factory):
	return register_industries(session_factory, ["Software Engineering", "Healthcare"])


@pytest.fixture
def settings(tmp_path) -> Settings:
	return Settings(
		OPENAI_API_KEY="sk-test-key-for-unit-tests",
		DATABASE_URL=f"sqlite:///{tmp_path / 'app.db'}",
		ENVIRONMENT="test",
		scheduler_enabled=False,
		_env_file=None,
	)
