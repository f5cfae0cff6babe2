import pytest

from career_insights.services.insight_prompt import INSIGHT_FIELDS, SALARY_RANGE_FIELDS, build_insight_prompt


def test_prompt_embeds_industry_name():
	prompt = build_insight_prompt("Software Engineering")
	assert "Analyze the current state of the Software Engineering industry" in prompt


def test_prompt_is_deterministic():
	assert build_insight_prompt("Healthcare") == build_insight_prompt("Healthcare")
	assert build_insight_prompt("Healthcare") != build_insight_prompt("Finance")


def test_prompt_requests_every_insight_field():
	prompt = build_insight_prompt("Finance")
	for field_name in INSIGHT_FIELDS + SALARY_RANGE_FIELDS:
		assert f'"{field_name}"' in prompt


def test_prompt_lists_enumerations_and_minimums():
	prompt = build_insight_prompt("Finance")
	assert '"HIGH" | "MEDIUM" | "LOW"' in prompt
	assert '"POSITIVE" | "NEUTRAL" | "NEGATIVE"' in prompt
	assert "MEDUIM" not in prompt
	assert "at least 5 common roles" in prompt
	assert "Return ONLY the JSON" in prompt


def test_prompt_requires_industry():
	with pytest.raises(ValueError):
		build_insight_prompt("   ")
