"""
KeyValueRecord — the physical store behind the event log.

One row per logical collection, e.g. "behavior_events:<user>" or
"strategy_usage:<user>". `value` holds the whole collection as a JSON
array; callers read it all, mutate in memory and write it all back.
"""
from datetime import datetime

from sqlalchemy import String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class KeyValueRecord(Base):
    __tablename__ = "kv_records"

    key: Mapped[str] = mapped_column(String(191), primary_key=True)
    value: Mapped[str] = mapped_column(
        Text, nullable=False, default="[]",
        comment="JSON-encoded list of serialized records",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
