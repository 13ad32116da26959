"""
Structured logging for the inventory ledger.

Responsibility:
    Render every record logged under the ``inventory_kernel`` namespace as
    one JSON object per line. Each line carries the fields the current
    session has bound (correlation id, acting role, the item or
    transaction being touched) plus whatever the call site passed in
    ``extra``.

Architecture position:
    Kernel, cross-cutting. Every layer logs through ``get_logger``; this
    module imports only the domain records it knows how to render.

Invariants:
    - Ledger records in ``extra`` are rendered by identity: an Item or a
      Transaction becomes its id, enums become their wire value and
      timestamps use the persisted ISO form.
    - A value whose key names a secret is masked before it is written.

Failure modes:
    None at log time: values the renderer does not know fall back to
    ``str()``.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from inventory_kernel.domain.dtos import BackupDestination, Item, Transaction
from inventory_kernel.domain.values import format_timestamp
from inventory_kernel.exceptions import InventoryKernelError

_NAMESPACE = "inventory_kernel"
_MASK = "***"
_SECRET_MARKERS = ("secret", "password")


# ---------------------------------------------------------------------------
# Session context
# ---------------------------------------------------------------------------


class LogContext:
    """Fields attached to every record logged in the current context."""

    FIELDS = ("correlation_id", "actor_role", "item_id", "transaction_id")

    _fields: ContextVar[dict[str, str] | None] = ContextVar(
        "inventory_log_fields", default=None
    )

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Update the named fields; ``None`` leaves a field as it is."""
        cls._fields.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(cls._fields.get() or {})

    @classmethod
    def clear(cls) -> None:
        cls._fields.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block."""
        token = cls._fields.set(cls._merged(fields))
        try:
            yield cls
        finally:
            cls._fields.reset(token)

    @classmethod
    def _merged(cls, fields: Mapping[str, str | None]) -> dict[str, str]:
        unknown = sorted(set(fields) - set(cls.FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(unknown)}")
        merged = cls.get_all()
        merged.update({name: value for name, value in fields.items() if value is not None})
        return merged


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _render(value: Any) -> Any:
    """JSON fallback for values ``json.dumps`` cannot encode itself."""
    if isinstance(value, (Item, Transaction)):
        return value.id
    if isinstance(value, BackupDestination):
        # client ids stay out of the logs
        return {"configured": value.is_configured, "has_folder": bool(value.folder_id)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_timestamp(value) if value.tzinfo else value.isoformat()
    if isinstance(value, (Decimal, Path)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    return str(value)


def _is_secret(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": format_timestamp(datetime.fromtimestamp(record.created, tz=UTC)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for key, value in vars(record).items():
            if key in _RECORD_ATTRIBUTES or key in payload:
                continue
            payload[key] = _MASK if _is_secret(key) else value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_render, ensure_ascii=False)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        # Only ledger errors expose their attributes; driver exceptions
        # carry statements and parameters.
        if isinstance(exc, InventoryKernelError):
            fields["exc_code"] = exc.code
            for key, value in vars(exc).items():
                if not key.startswith("_"):
                    fields[f"exc_{key}"] = _MASK if _is_secret(key) else value
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the ``inventory_kernel`` namespace."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler (stderr by default) to the namespace logger.

    Later calls are ignored until ``reset_logging`` runs.
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger(_NAMESPACE)
    root.setLevel(level)
    root.propagate = False
    target = handler or logging.StreamHandler(sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging``. FOR TESTING ONLY."""
    global _configured
    _configured = False
    root = logging.getLogger(_NAMESPACE)
    for existing in list(root.handlers):
        if isinstance(existing.formatter, StructuredFormatter):
            root.removeHandler(existing)
    root.setLevel(logging.WARNING)
