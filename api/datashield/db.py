import logging
from datetime import datetime
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import PersistenceFailed
from .models import AnalysisRecord, Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, **kwargs: Any) -> Engine:
    # pool_pre_ping avoids stale connections when the DB is restarted.
    return create_engine(database_url, pool_pre_ping=True, **kwargs)


class AnalysisStore:
    """
    Append-only sink for completed analyses.

    Owns the engine for the lifetime of the process: built once during startup,
    shared by every request handler, disposed on shutdown.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "AnalysisStore":
        return cls(build_engine(database_url))

    def create_schema(self) -> None:
        Base.metadata.create_all(self.engine)

    def ping(self) -> bool:
        # Simple connectivity check for /health.
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def record(
        self,
        *,
        kind: str,
        input_summary: str,
        enrichment: dict[str, Any],
        verdict: str,
        created_at: datetime,
        caller_address: str | None,
        indicators: list[str] | None = None,
    ) -> int:
        row = AnalysisRecord(
            kind=kind,
            input_summary=input_summary,
            enrichment=enrichment,
            indicators=list(indicators) if indicators is not None else None,
            verdict=verdict,
            created_at=created_at,
            caller_address=caller_address,
        )
        try:
            with Session(self.engine) as session, session.begin():
                session.add(row)
                session.flush()
                record_id = row.id
        except SQLAlchemyError as exc:
            raise PersistenceFailed(f"Could not store analysis record: {exc}", cause=exc) from exc
        logger.debug(f"Stored {kind} analysis record id={record_id}")
        return record_id

    def close(self) -> None:
        self.engine.dispose()
