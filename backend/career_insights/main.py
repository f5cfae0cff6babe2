"""Backend application entrypoint for the Career Insights service."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from career_insights.config import Settings, get_settings
from career_insights.database import build_engine, build_session_factory, check_database_connection, init_db
from career_insights.routes.cover_letter_routes import router as cover_letter_router
from career_insights.routes.insight_routes import router as insight_router
from career_insights.scheduler import build_insight_scheduler
from career_insights.services.insight_model_client import InsightTextGenerator, OpenAIInsightClient
from career_insights.services.insight_refresh_service import InsightRefreshJob


logger = logging.getLogger("career-insights")


def configure_logging(settings: Settings) -> logging.Logger:
	"""Configure application-wide structured logging."""
	logging.basicConfig(
		level=getattr(logging, settings.log_level.upper(), logging.INFO),
		format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
	)
	logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
	return logger


def build_lifespan(settings: Settings, generator: InsightTextGenerator | None = None):
	"""Build the lifespan that owns the engine, model client, refresh job, and scheduler."""

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		logger.info("Starting server | app=%s | version=%s", settings.app_name, settings.app_version)
		engine = build_engine(settings.database_url)
		init_db(engine)
		logger.info("Database metadata initialization completed")

		owned_client = None
		model_client = generator
		if model_client is None:
			owned_client = OpenAIInsightClient.from_settings(settings)
			model_client = owned_client

		app.state.engine = engine
		app.state.session_factory = build_session_factory(engine)
		app.state.refresh_job = InsightRefreshJob(
			session_factory=app.state.session_factory,
			generator=model_client,
			max_workers=settings.insight_refresh_max_workers,
			refresh_interval=timedelta(days=settings.insight_refresh_interval_days),
		)
		app.state.refresh_cancel_event = threading.Event()
		app.state.scheduler = None
		if settings.scheduler_enabled:
			app.state.scheduler = build_insight_scheduler(
				app.state.refresh_job, settings, cancel_event=app.state.refresh_cancel_event
			)
			app.state.scheduler.start()
			logger.info("Scheduler started")

		app.state.started_at = time.time()
		app.state.instance_id = str(uuid.uuid4())
		app.state.environment = settings.environment
		try:
			yield
		finally:
			app.state.refresh_cancel_event.set()
			if app.state.scheduler is not None:
				app.state.scheduler.shutdown(wait=False)
				logger.info("Scheduler shut down")
			idle = await asyncio.to_thread(
				app.state.refresh_job.wait_until_idle, settings.insight_refresh_shutdown_timeout_seconds
			)
			if not idle:
				logger.warning(
					"insight_refresh_still_running_at_shutdown | timeout_seconds=%s",
					settings.insight_refresh_shutdown_timeout_seconds,
				)
			if owned_client is not None:
				owned_client.close()
			engine.dispose()
			logger.info("Shutting down server | app=%s", settings.app_name)

	return lifespan


def add_cors_middleware(app: FastAPI, app_settings: Settings) -> None:
	"""Attach CORS middleware for frontend interaction."""
	app.add_middleware(
		CORSMiddleware,
		allow_origins=app_settings.allowed_cors_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)


def add_request_context_middleware(app: FastAPI) -> None:
	"""Attach request context middleware for tracing and observability."""

	@app.middleware("http")
	async def inject_request_context(request: Request, call_next: Callable):
		request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
		request.state.request_id = request_id
		start = time.perf_counter()

		response = await call_next(request)

		elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
		response.headers["X-Request-ID"] = request_id
		response.headers["X-Response-Time-ms"] = str(elapsed_ms)

		logger.info(
			"request_complete | request_id=%s | method=%s | path=%s | status=%s | latency_ms=%s",
			request_id,
			request.method,
			request.url.path,
			response.status_code,
			elapsed_ms,
		)
		return response


def register_exception_handlers(app: FastAPI) -> None:
	"""Register global exception handlers."""

	@app.exception_handler(StarletteHTTPException)
	async def http_exception_handler(request: Request, exc: StarletteHTTPException):
		request_id = getattr(request.state, "request_id", "unknown")
		return JSONResponse(
			status_code=exc.status_code,
			content={
				"error": {
					"type": "http_error",
					"message": exc.detail,
					"request_id": request_id,
				}
			},
		)

	@app.exception_handler(RequestValidationError)
	async def validation_exception_handler(request: Request, exc: RequestValidationError):
		request_id = getattr(request.state, "request_id", "unknown")
		return JSONResponse(
			status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
			content={
				"error": {
					"type": "validation_error",
					"message": "Request payload validation failed.",
					"details": exc.errors(),
					"request_id": request_id,
				}
			},
		)

	@app.exception_handler(Exception)
	async def unhandled_exception_handler(request: Request, exc: Exception):
		request_id = getattr(request.state, "request_id", "unknown")
		logger.exception("unhandled_exception | request_id=%s", request_id)
		return JSONResponse(
			status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
			content={
				"error": {
					"type": "internal_server_error",
					"message": "An unexpected error occurred.",
					"request_id": request_id,
				}
			},
		)


def register_routes(app: FastAPI, app_settings: Settings) -> None:
	"""Register page routes at the root and API routers under the shared prefix."""
	app.include_router(cover_letter_router)
	app.include_router(insight_router, prefix=app_settings.api_prefix)


def create_app(settings: Settings | None = None, generator: InsightTextGenerator | None = None) -> FastAPI:
	"""Create and configure FastAPI application instance.

	Settings load here, so a missing AI service key fails before the scheduler
	or any request handling starts.
	"""
	settings = settings or get_settings()
	configure_logging(settings)

	app = FastAPI(
		title=settings.app_name,
		version=settings.app_version,
		description=settings.app_description,
		lifespan=build_lifespan(settings, generator),
		docs_url="/docs",
		redoc_url="/redoc",
		openapi_url=f"{settings.api_prefix}/openapi.json",
	)

	add_cors_middleware(app, settings)
	add_request_context_middleware(app)
	register_exception_handlers(app)
	register_routes(app, settings)

	@app.get("/", tags=["system"], summary="Root endpoint")
	def root() -> dict[str, str]:
		return {
			"service": settings.app_name,
			"version": settings.app_version,
			"status": "running",
		}

	@app.get("/health", tags=["system"], summary="Service health check")
	def health_check(request: Request) -> dict[str, object]:
		"""Return runtime and dependency health status."""
		db_ok = check_database_connection(request.app.state.engine)
		uptime_seconds = int(time.time() - request.app.state.started_at)
		scheduler = request.app.state.scheduler

		status_text = "healthy" if db_ok else "degraded"
		status_code = "ok" if db_ok else "db_unreachable"

		return {
			"status": status_text,
			"code": status_code,
			"environment": request.app.state.environment,
			"version": settings.app_version,
			"instance_id": request.app.state.instance_id,
			"database": {"connected": db_ok},
			"scheduler": {"running": bool(scheduler is not None and scheduler.running)},
			"uptime_seconds": uptime_seconds,
		}

	return app


app = create_app()


if __name__ == "__main__":
	import uvicorn

	uvicorn.run(app, host="0.0.0.0", port=8000)
