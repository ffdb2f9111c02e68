# storefront/database.py
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from storefront.core.config import get_settings

settings = get_settings()


def build_engine(db_url: str):
    """
    Create the SQLModel engine for the given URL.

    - SQLite: allow use from FastAPI's threadpool; an in-memory URL
      ("sqlite://") shares a single connection so every session sees
      the same database.
    - Postgres: append sslmode=require when not present and validate
      pooled connections before use.
    """
    if db_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=False, **kwargs)

    if db_url.startswith("postgresql") and "sslmode=" not in db_url:
        db_url += "&sslmode=require" if "?" in db_url else "?sslmode=require"

    return create_engine(db_url, echo=False, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables(bind=None) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
