"""Database connectivity, session lifecycle, and persistence integration boundary."""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker


Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
	cursor = dbapi_connection.cursor()
	cursor.execute("PRAGMA foreign_keys=ON")
	cursor.close()


def build_engine(database_url: str) -> Engine:
	"""Create a production-safe SQLAlchemy engine focused on PostgreSQL."""
	engine_kwargs: dict[str, object] = {
		"pool_pre_ping": True,
		"pool_recycle": 1800,
	}

	if database_url.startswith("postgresql"):
		engine_kwargs.update(
			{
				"pool_size": 20,
				"max_overflow": 40,
				"pool_timeout": 30,
				"pool_use_lifo": True,
			}
		)
	elif database_url.startswith("sqlite"):
		engine_kwargs.update({"connect_args": {"check_same_thread": False, "timeout": 30}})

	engine = create_engine(database_url, **engine_kwargs)
	if database_url.startswith("sqlite"):
		event.listen(engine, "connect", _enable_sqlite_foreign_keys)
	return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
	"""Create the session factory shared by request handlers and the refresh job."""
	return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def iter_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
	"""Yield a database session and close it when the caller is done."""
	session = session_factory()
	try:
		yield session
	finally:
		session.close()


def init_db(engine: Engine) -> None:
	"""Create registered metadata tables at application startup."""
	from career_insights.models import industry_insight_model  # noqa: F401

	Base.metadata.create_all(bind=engine)


def check_database_connection(engine: Engine) -> bool:
	"""Run a lightweight readiness query against the configured database."""
	try:
		with engine.connect() as connection:
			connection.execute(text("SELECT 1"))
		return True
	except SQLAlchemyError:
		return False
