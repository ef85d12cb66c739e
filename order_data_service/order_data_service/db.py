"""Engine and session factory for the ledger database."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import Settings
from .models import Base


def create_db_engine(settings: Settings) -> Engine:
    """Create the engine with a bounded wait for connections and locks."""
    if settings.database_url.startswith("sqlite"):
        return create_engine(
            settings.database_url,
            echo=settings.echo_sql,
            connect_args={"check_same_thread": False, "timeout": settings.db_timeout_seconds},
        )
    return create_engine(
        settings.database_url,
        echo=settings.echo_sql,
        pool_pre_ping=True,
        pool_timeout=settings.db_timeout_seconds,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create missing tables."""
    Base.metadata.create_all(bind=engine)
