"""
Module: inventory_kernel.db.models
Responsibility: ORM persistence for opaque state blobs keyed by a fixed,
    versioned storage key (the item corpus, the backup destination config).
Architecture position: Kernel > DB.  May import from db/base.py only.

Invariants enforced:
    - One row per key (primary key).  Writes replace the whole blob.
"""

from datetime import datetime

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base


class StateRecord(Base):
    """
    One serialized state blob.

    Contract:
        ``value`` is JSON text the kernel writes and reads back; the table
        knows nothing about its shape.
    """

    __tablename__ = "app_state"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<StateRecord {self.key} ({len(self.value)} chars)>"
