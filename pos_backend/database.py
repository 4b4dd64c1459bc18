# pos_backend/database.py
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from pos_backend.config import Settings

Base = declarative_base()


def build_engine(url: str) -> Engine:
    # SQLite needs the same-thread check off; in-memory databases share one connection
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


@dataclass
class AppContext:
    """Everything a request handler needs from the process: settings and the store."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker

    def init_db(self) -> None:
        # Import every model so the metadata is complete before create_all
        from pos_backend.models import customer, log, product, sale, session, users  # noqa: F401

        Base.metadata.create_all(bind=self.engine)


def build_context(settings: Settings) -> AppContext:
    engine = build_engine(settings.database_url)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return AppContext(settings=settings, engine=engine, session_factory=factory)


def get_context(request: Request) -> AppContext:
    return request.app.state.ctx


def get_settings(request: Request) -> Settings:
    return request.app.state.ctx.settings


def get_db(request: Request):
    db = request.app.state.ctx.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
