"""ORM models for persisted progression state.

Each namespace (one account's achievement blob, or one account's curriculum
track) is stored as a single row so that a write replaces the whole blob.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from voidspace.db.base import Base


class ProgressBlob(Base):
    """Opaque JSON blob keyed by namespace."""

    __tablename__ = "progress_blobs"

    namespace: Mapped[str] = mapped_column(String(255), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"ProgressBlob(namespace={self.namespace!r}, bytes={len(self.payload)})"
