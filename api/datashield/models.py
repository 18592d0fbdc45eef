from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests).
JSONType = sa.JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


class AnalysisRecord(Base):
    """One completed analysis. Rows are appended only, never updated."""

    __tablename__ = "analysis_records"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    input_summary: Mapped[str] = mapped_column(Text, nullable=False)
    enrichment: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    indicators: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    verdict: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    caller_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        sa.CheckConstraint("kind IN ('url', 'email')", name="analysis_records_kind_check"),
        sa.Index("ix_analysis_records_created_at", "created_at"),
    )
