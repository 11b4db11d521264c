from __future__ import annotations

"""SQLAlchemy ORM models for session persistence.

One row per task thread. The whole ``SessionRecord`` is stored as JSON so the
schema does not change when the record grows a field.

Table names are prefixed with ``tl_`` to avoid collisions in shared databases.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class SessionRow(Base):
    """Row model for ``tl_sessions``.

    - ``thread_id``: task thread identifier (primary key).
    - ``payload``: ``SessionRecord.model_dump(mode="json")``.
    - ``awaiting``: whether the thread is suspended, for querying without
      decoding the payload.
    """

    __tablename__ = "tl_sessions"

    thread_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON)
    awaiting: Mapped[bool] = mapped_column(default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
