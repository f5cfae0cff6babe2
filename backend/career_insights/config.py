"""Centralized backend configuration and environment-driven settings definitions."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	"""Application settings loaded from environment variables."""

	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	DATABASE_URL: str = Field(default="sqlite:///./career_insights.db")
	OPENAI_API_KEY: SecretStr
	OPENAI_BASE_URL: str | None = Field(default=None)
	ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(default="production")

	app_name: str = Field(default="Career Insights")
	app_version: str = Field(default="1.0.0")
	app_description: str = Field(
		default=(
			"Career tooling backend serving the cover letter workspace and weekly "
			"AI-generated industry insights."
		)
	)
	debug: bool = Field(default=False)

	api_prefix: str = Field(default="/api/v1")
	frontend_origin: str = Field(default="http://localhost:3000")
	cors_origins: str = Field(default="http://localhost:3000,http://127.0.0.1:3000")

	log_level: str = Field(default="INFO")

	insight_model: str = Field(default="gpt-4o-mini")
	insight_temperature: float = Field(default=0.2)
	insight_request_timeout_seconds: float = Field(default=60.0)
	insight_max_retries: int = Field(default=3)
	insight_refresh_max_workers: int = Field(default=1)
	insight_refresh_interval_days: int = Field(default=7)
	insight_refresh_shutdown_timeout_seconds: float = Field(default=30.0)

	scheduler_enabled: bool = Field(default=True)
	scheduler_timezone: str = Field(default="UTC")
	insight_refresh_day_of_week: str = Field(default="sun")
	insight_refresh_hour: int = Field(default=0)
	insight_refresh_minute: int = Field(default=0)

	@field_validator("OPENAI_API_KEY")
	@classmethod
	def validate_openai_key(cls, value: SecretStr) -> SecretStr:
		"""Reject blank AI service credentials so startup fails before any work is scheduled."""
		if not value.get_secret_value().strip():
			raise ValueError("OPENAI_API_KEY must be set to a non-empty value.")
		return value

	@field_validator("insight_request_timeout_seconds")
	@classmethod
	def validate_request_timeout(cls, value: float) -> float:
		"""Validate model request timeout bounds in seconds."""
		if value <= 0 or value > 600:
			raise ValueError("insight_request_timeout_seconds must be between 0 and 600.")
		return value

	@field_validator("insight_max_retries")
	@classmethod
	def validate_max_retries(cls, value: int) -> int:
		if value < 0 or value > 10:
			raise ValueError("insight_max_retries must be between 0 and 10.")
		return value

	@field_validator("insight_refresh_max_workers")
	@classmethod
	def validate_max_workers(cls, value: int) -> int:
		if value < 1 or value > 32:
			raise ValueError("insight_refresh_max_workers must be between 1 and 32.")
		return value

	@field_validator("insight_refresh_interval_days")
	@classmethod
	def validate_interval_days(cls, value: int) -> int:
		if value < 1:
			raise ValueError("insight_refresh_interval_days must be at least 1.")
		return value

	@property
	def database_url(self) -> str:
		"""Lowercase accessor for database URL."""
		return self.DATABASE_URL

	@property
	def openai_api_key(self) -> str:
		"""Lowercase accessor for the AI service key."""
		return self.OPENAI_API_KEY.get_secret_value()

	@property
	def openai_base_url(self) -> str | None:
		return self.OPENAI_BASE_URL

	@property
	def environment(self) -> str:
		"""Lowercase accessor for deployment environment."""
		return self.ENVIRONMENT

	@property
	def allowed_cors_origins(self) -> List[str]:
		"""Return normalized CORS origins list."""
		raw_origins = [item.strip() for item in self.cors_origins.split(",")]
		merged = [origin for origin in raw_origins if origin]
		if self.frontend_origin and self.frontend_origin not in merged:
			merged.append(self.frontend_origin)
		return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
	"""Return cached settings instance for dependency injection."""
	return Settings()
