"""Environment-driven settings for the order data service."""

import os

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Runtime configuration.

    Attributes:
        database_url: SQLAlchemy URL of the ledger database.
        db_timeout_seconds: Upper bound on waiting for a connection or a lock.
        echo_sql: Log every SQL statement.
    """

    database_url: str = "sqlite:///./order_ledger.db"
    db_timeout_seconds: float = Field(10.0, gt=0)
    echo_sql: bool = False


def load_settings() -> Settings:
    """Build settings from the process environment."""
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./order_ledger.db"),
        db_timeout_seconds=float(os.getenv("DB_TIMEOUT_SECONDS", "10")),
        echo_sql=os.getenv("DB_ECHO", "false").lower() == "true",
    )
