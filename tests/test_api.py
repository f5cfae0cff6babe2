import threading
from unittest.mock import PropertyMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import FakeGenerator
from career_insights.database import build_engine, build_session_factory
from career_insights.main import create_app
from career_insights.services.insight_refresh_service import InsightRefreshJob
from career_insights.services.insight_repository import get_insight, register_industries


@pytest.fixture
def generator():
	return FakeGenerator()


@pytest.fixture
def client(settings, generator):
	app = create_app(settings, generator=generator)
	with TestClient(app) as test_client:
		register_industries(app.state.session_factory, ["Software Engineering", "Healthcare"])
		yield test_client


def test_new_cover_letter_page(client):
	response = client.get("/cover-letter/new")

	assert response.status_code == 200
	assert response.headers["content-type"].startswith("text/html")
	assert "Create Cover Letter" in response.text
	assert "Generate a tailored cover letter for your job application" in response.text
	assert 'href="/cover-letter"' in response.text
	assert 'id="cover-letter-generator"' in response.text


def test_health_reports_database_and_scheduler(client):
	response = client.get("/health")

	assert response.status_code == 200
	body = response.json()
	assert body["status"] == "healthy"
	assert body["database"] == {"connected": True}
	assert body["scheduler"] == {"running": False}
	assert response.headers["X-Request-ID"]


def test_list_insights_before_refresh(client):
	response = client.get("/api/v1/insights")

	assert response.status_code == 200
	body = response.json()
	assert body["count"] == 2
	assert [item["industry"] for item in body["insights"]] == ["Healthcare", "Software Engineering"]
	assert body["insights"][0]["last_updated"] is None


def test_refresh_trigger_then_read_detail(client, generator):
	response = client.post("/api/v1/insights/refresh")
	assert response.status_code == 202
	assert response.json() == {"status": "accepted"}
	assert len(generator.prompts) == 2

	detail = client.get("/api/v1/insights/Software Engineering")

	assert detail.status_code == 200
	body = detail.json()
	assert body["growth_rate"] == 12.5
	assert body["demand_level"] == "HIGH"
	assert body["market_outlook"] == "POSITIVE"
	assert len(body["salary_ranges"]) == 5
	assert body["salary_ranges"][0]["role"] == "Data Engineer"


def test_unknown_industry_returns_error_envelope(client):
	response = client.get("/api/v1/insights/Astrology")

	assert response.status_code == 404
	error = response.json()["error"]
	assert error["type"] == "http_error"
	assert "Astrology" in error["message"]


def test_scheduler_starts_and_stops_with_app(settings, generator):
	settings.scheduler_enabled = True
	app = create_app(settings, generator=generator)

	with TestClient(app) as test_client:
		assert app.state.scheduler.running
		assert test_client.get("/health").json()["scheduler"] == {"running": True}

	assert not app.state.scheduler.running


def test_refresh_trigger_conflicts_with_running_cycle(client, generator):
	with patch.object(InsightRefreshJob, "is_running", new_callable=PropertyMock, return_value=True):
		response = client.post("/api/v1/insights/refresh")

	assert response.status_code == 409
	assert response.json()["error"]["type"] == "http_error"
	assert generator.prompts == []


def test_insight_timestamps_carry_utc_offset(client):
	client.post("/api/v1/insights/refresh")

	body = client.get("/api/v1/insights/Healthcare").json()

	assert body["last_updated"].endswith(("Z", "+00:00"))
	assert body["next_update"].endswith(("Z", "+00:00"))


def test_shutdown_cancels_industries_not_yet_started(settings):
	entered = threading.Event()
	state = {}

	class BlockingGenerator(FakeGenerator):
		def generate(self, prompt):
			entered.set()
			state["cancel_event"].wait(5)
			return super().generate(prompt)

	app = create_app(settings, generator=BlockingGenerator())
	results = []
	with TestClient(app):
		register_industries(app.state.session_factory, ["Software Engineering", "Healthcare"])
		state["cancel_event"] = app.state.refresh_cancel_event
		worker = threading.Thread(
			target=lambda: results.append(app.state.refresh_job.run(cancel_event=app.state.refresh_cancel_event))
		)
		worker.start()
		assert entered.wait(5)

	worker.join(5)
	result = results[0]
	assert result.succeeded == ["Healthcare"]
	assert result.cancelled == ["Software Engineering"]

	engine = build_engine(settings.database_url)
	try:
		with build_session_factory(engine)() as session:
			healthcare = get_insight(session, "Healthcare")
			software = get_insight(session, "Software Engineering")
			assert healthcare.last_updated is not None
			assert len(healthcare.salary_ranges) == 5
			assert software.last_updated is None
			assert software.salary_ranges == []
	finally:
		engine.dispose()


def test_module_level_app_is_importable():
	from career_insights.main import app

	assert isinstance(app, FastAPI)
