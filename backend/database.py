"""
Relational database access

The engine and session factory are created per application (see
backend.main.create_app) rather than at import time, so tests can point the
app at an in-memory SQLite database.
"""
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


def create_db_engine(url: str) -> Engine:
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # every connection must see the same in-memory database
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    # models must be imported for their tables to be registered on Base
    from backend import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def ping(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_session(request: Request) -> Iterator[Session]:
    """One session per request; uncommitted work is rolled back on close."""
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()
