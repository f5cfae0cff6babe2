"""Client boundary for the external text-generation service used by insight refresh."""

from __future__ import annotations

import logging
from typing import Protocol

from openai import APIError, OpenAI

from career_insights.config import Settings


logger = logging.getLogger(__name__)


class InsightModelError(RuntimeError):
	"""Raised when the text-generation service fails, times out, or rate limits after retries."""


class InsightTextGenerator(Protocol):
	"""Anything that turns a prompt into raw model text."""

	def generate(self, prompt: str) -> str: ...


class OpenAIInsightClient:
	"""Chat-completions client with a per-call timeout and bounded retries with backoff."""

	def __init__(
		self,
		api_key: str,
		model: str,
		base_url: str | None = None,
		timeout_seconds: float = 60.0,
		max_retries: int = 3,
		temperature: float = 0.2,
	) -> None:
		self.model = model
		self.temperature = temperature
		self._client = OpenAI(
			api_key=api_key,
			base_url=base_url,
			timeout=timeout_seconds,
			max_retries=max_retries,
		)

	@classmethod
	def from_settings(cls, settings: Settings) -> "OpenAIInsightClient":
		return cls(
			api_key=settings.openai_api_key,
			model=settings.insight_model,
			base_url=settings.openai_base_url,
			timeout_seconds=settings.insight_request_timeout_seconds,
			max_retries=settings.insight_max_retries,
			temperature=settings.insight_temperature,
		)

	def generate(self, prompt: str) -> str:
		"""Return the first choice's text, or an empty string when the model sent none."""
		try:
			completion = self._client.chat.completions.create(
				model=self.model,
				messages=[{"role": "user", "content": prompt}],
				temperature=self.temperature,
			)
		except APIError as exc:
			logger.warning("insight_model_call_failed | model=%s | error=%s", self.model, exc)
			raise InsightModelError(f"Text generation request failed: {exc}") from exc

		if not completion.choices:
			return ""
		return completion.choices[0].message.content or ""

	def close(self) -> None:
		self._client.close()
