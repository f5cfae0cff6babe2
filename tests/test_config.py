import pytest
from pydantic import ValidationError

from career_insights.config import Settings


def test_missing_api_key_fails_fast(monkeypatch):
	monkeypatch.delenv("OPENAI_API_KEY", raising=False)

	with pytest.raises(ValidationError) as exc_info:
		Settings(_env_file=None)

	assert "OPENAI_API_KEY" in str(exc_info.value)


def test_blank_api_key_is_rejected():
	with pytest.raises(ValidationError):
		Settings(OPENAI_API_KEY="   ", _env_file=None)


def test_defaults_schedule_sunday_midnight(settings):
	assert settings.insight_refresh_day_of_week == "sun"
	assert settings.insight_refresh_hour == 0
	assert settings.insight_refresh_minute == 0
	assert settings.insight_refresh_interval_days == 7


def test_secret_is_not_rendered(settings):
	assert "sk-test-key-for-unit-tests" not in repr(settings)
	assert settings.openai_api_key == "sk-test-key-for-unit-tests"


@pytest.mark.parametrize(
	"field_name, value",
	[
		("insight_refresh_max_workers", 0),
		("insight_max_retries", 11),
		("insight_request_timeout_seconds", 0),
		("insight_refresh_interval_days", 0),
	],
)
def test_numeric_bounds_are_validated(field_name, value):
	with pytest.raises(ValidationError):
		Settings(OPENAI_API_KEY="sk-test", _env_file=None, **{field_name: value})


def test_cors_origins_include_frontend(settings):
	assert "http://localhost:3000" in settings.allowed_cors_origins
