"""
StateRepository -- Local persisted state for the ledger.

Responsibility:
    Reads and writes the two persisted blobs: the item corpus (JSON array
    of Item wire dicts) and the backup destination settings (JSON object),
    each under its own fixed, versioned key in the ``app_state`` table.

Architecture position:
    Kernel > Services -- imperative shell.  Owns one short transaction per
    call through ``db.engine.session_scope`` with the injected session
    factory.

Failure modes:
    - Loading is FAIL-OPEN: a missing row, malformed JSON or a record that
      does not match the Item shape is logged (``state_load_failed``) and
      treated as "no prior state" rather than propagated.  Corrupt local
      data must never stop the application from starting.
    - Saving wraps database errors in PersistenceError so the application
      boundary can report them like any other ledger error.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.db.engine import session_scope
from inventory_kernel.db.models import StateRecord
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import BackupDestination, Item
from inventory_kernel.exceptions import InventoryKernelError, PersistenceError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.state_repository")

DEFAULT_ITEMS_KEY = "inventory_system_data_v2"
DEFAULT_BACKUP_CONFIG_KEY = "inventory_drive_config"

# Everything a malformed blob can raise while being decoded into records.
_PARSE_ERRORS = (ValueError, KeyError, TypeError, AttributeError, InventoryKernelError)


class StateRepository:
    """
    Key/value access to persisted state.

    Contract:
        The caller supplies the session factory; every public method runs
        in its own committed transaction.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        items_key: str = DEFAULT_ITEMS_KEY,
        backup_config_key: str = DEFAULT_BACKUP_CONFIG_KEY,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self.items_key = items_key
        self.backup_config_key = backup_config_key
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Raw blobs
    # ------------------------------------------------------------------

    def get_raw(self, key: str) -> str | None:
        with session_scope(self._session_factory) as session:
            record = session.get(StateRecord, key)
            return record.value if record is not None else None

    def put_raw(self, key: str, value: str) -> None:
        """Replace the blob under ``key``; database failures become PersistenceError."""
        try:
            with session_scope(self._session_factory) as session:
                record = session.get(StateRecord, key)
                if record is None:
                    session.add(StateRecord(key=key, value=value, updated_at=self._clock.now()))
                else:
                    record.value = value
                    record.updated_at = self._clock.now()
        except SQLAlchemyError as exc:
            logger.error("state_save_failed", extra={"key": key}, exc_info=True)
            raise PersistenceError(key, str(exc)) from exc

    # ------------------------------------------------------------------
    # Item corpus
    # ------------------------------------------------------------------

    def load_items(self) -> tuple[Item, ...]:
        """Saved corpus, or ``()`` when absent or unreadable."""
        raw = self.get_raw(self.items_key)
        if raw is None:
            return ()
        context: dict[str, object] = {"key": self.items_key}
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            decoded = []
            for index, entry in enumerate(data):
                context["record_index"] = index
                context["record_id"] = entry.get("id") if isinstance(entry, dict) else None
                decoded.append(Item.from_dict(entry))
            items = tuple(decoded)
        except _PARSE_ERRORS:
            logger.warning("state_load_failed", extra=context, exc_info=True)
            return ()
        logger.info("state_loaded", extra={"key": self.items_key, "item_count": len(items)})
        return items

    def save_items(self, items: Iterable[Item]) -> None:
        payload = [item.to_dict() for item in items]
        self.put_raw(self.items_key, json.dumps(payload, ensure_ascii=False))
        logger.debug("state_saved", extra={"key": self.items_key, "item_count": len(payload)})

    # ------------------------------------------------------------------
    # Backup destination
    # ------------------------------------------------------------------

    def load_backup_destination(self) -> BackupDestination:
        """Saved backup settings, or blank settings when absent or unreadable."""
        raw = self.get_raw(self.backup_config_key)
        if raw is None:
            return BackupDestination()
        try:
            data = json.loads(raw)
            return BackupDestination.from_dict(data)
        except _PARSE_ERRORS:
            logger.warning(
                "state_load_failed",
                extra={"key": self.backup_config_key},
                exc_info=True,
            )
            return BackupDestination()

    def save_backup_destination(self, destination: BackupDestination) -> None:
        self.put_raw(self.backup_config_key, json.dumps(destination.to_dict()))
        logger.info(
            "backup_destination_saved",
            extra={"has_folder": bool(destination.folder_id)},
        )
