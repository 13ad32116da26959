"""
Module: inventory_kernel.db.base
Responsibility: Declarative base class for the SQLAlchemy ORM models and the
    type annotation map that keeps column types consistent.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  This module MUST NOT import from models/, services/,
    selectors/, domain/, or outer layers.

Invariants enforced:
    - datetime maps to DateTime(timezone=True) -- timestamps are always
      timezone-aware.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - datetime maps to DateTime(timezone=True).
        - str maps to Text unless a model narrows it.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        str: Text,
    }
