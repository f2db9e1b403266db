from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from metis.db.base import Base, TimestampMixin


class StorageEntry(TimestampMixin, Base):
    """One named slot of the key-value store; ``value`` holds a JSON array."""

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, default="", nullable=False)
