"""
inventory_services.application -- Explicit application context.

Responsibility:
    Own the store, the state repository, the role authority and the backup
    uploader for one session, and expose the operations a presentation
    layer calls. Every operation requires a logged-in role and is gated by
    the categories that role may touch.

Architecture position:
    Services layer, outermost orchestration. Built by ``open`` from an
    InventoryConfig; nothing here is a module-level global apart from the
    engine owned by ``inventory_kernel.db``.

Invariants:
    - Persistence: the repository flush is registered as a store listener,
      so every committed mutation is written before the call returns.
    - Serial numbers are checked for uniqueness here, before the store is
      asked to record the movement. The store itself does not check them.

Failure modes:
    - Operations raise InventoryKernelError subclasses. ``run`` converts
      them into an ActionResult carrying a Notice so a UI can display one
      message and carry on.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

from inventory_config.schema import ExportSettings, InventoryConfig
from inventory_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.credentials import Role
from inventory_kernel.domain.dtos import (
    BackupDestination,
    Item,
    ItemDraft,
    Transaction,
    TransactionDraft,
)
from inventory_kernel.domain.stock import CategoryTotals, category_totals
from inventory_kernel.domain.validation import is_duplicate_serial_number
from inventory_kernel.domain.values import ItemType, clean_text
from inventory_kernel.exceptions import (
    AuthorizationError,
    DuplicateSerialNumberError,
    InventoryKernelError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.selectors.item_selector import ItemSelector, ItemView
from inventory_kernel.services.inventory_store import InventoryStore
from inventory_kernel.services.state_repository import StateRepository
from inventory_services.auth import RoleAuthority, credentials_from_config
from inventory_services.backup import (
    BackupUploader,
    DirectoryFileStorage,
    FileStorageClient,
    snapshot,
)
from inventory_services.export import export_filename, to_delimited_text, write_export

logger = get_logger("services.application")

T = TypeVar("T")

_SERIAL_FIELDS = ("serial_number", "serialNumber")


@dataclass(frozen=True)
class Notice:
    """One user-facing message produced by a failed (or announced) action."""

    code: str
    message: str


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Outcome of ``InventoryApplication.run``."""

    ok: bool
    value: T | None = None
    notice: Notice | None = None


class InventoryApplication:
    """
    Session-scoped facade over the ledger.

    Contract:
        Construct with ``open`` for the configured database, or directly
        with collaborators in tests. ``login`` must succeed before any
        other operation.
    """

    def __init__(
        self,
        store: InventoryStore,
        repository: StateRepository,
        authority: RoleAuthority,
        uploader: BackupUploader,
        *,
        clock: Clock | None = None,
        export_settings: ExportSettings | None = None,
    ):
        self.store = store
        self.repository = repository
        self.authority = authority
        self.uploader = uploader
        self.selector = ItemSelector(store)
        self._clock = clock or SystemClock()
        self._export_settings = export_settings
        self._backup_destination = repository.load_backup_destination()
        self._role: Role | None = None

    @classmethod
    def open(
        cls,
        config: InventoryConfig,
        clock: Clock | None = None,
        storage_client: FileStorageClient | None = None,
    ) -> InventoryApplication:
        """Build the application from persisted state and configuration."""
        clock = clock or SystemClock()
        init_engine_from_url(config.storage.database_url)
        create_tables()

        repository = StateRepository(
            get_session_factory(),
            items_key=config.storage.items_key,
            backup_config_key=config.storage.backup_config_key,
            clock=clock,
        )
        credentials = credentials_from_config(config.security)
        store = InventoryStore(
            credentials,
            clock,
            repository.load_items(),
            initial_quantity_remark=config.ledger.initial_quantity_remark,
        )
        store.add_listener(repository.save_items)

        uploader = BackupUploader(
            storage_client or DirectoryFileStorage(config.backup.directory),
            file_name=config.backup.file_name,
        )
        app = cls(
            store,
            repository,
            RoleAuthority(credentials),
            uploader,
            clock=clock,
            export_settings=config.export,
        )
        logger.info("application_opened", extra={"item_count": len(store.items())})
        return app

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def role(self) -> Role | None:
        return self._role

    @property
    def clock(self) -> Clock:
        return self._clock

    def login(self, secret: str) -> Role:
        self._role = self.authority.login(secret)
        return self._role

    def logout(self) -> None:
        logger.info("logout", extra={"actor_role": self._role.value if self._role else None})
        self._role = None

    def allowed_categories(self) -> tuple[ItemType, ...]:
        return self.authority.allowed_categories(self._require_role())

    def _require_role(self) -> Role:
        if self._role is None:
            raise AuthorizationError("No active session: log in first")
        return self._role

    def _require_category(self, category: ItemType | str) -> ItemType:
        return self.authority.require_category(self._require_role(), category)

    def _require_item(self, item_id: str) -> Item:
        role = self._require_role()
        item = self.store.get_item(item_id)
        self.authority.require_category(role, item.type)
        return item

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def create_item(self, draft: ItemDraft, initial_quantity: int = 0) -> Item:
        self._require_category(draft.type)
        return self.store.create_item(draft, initial_quantity)

    def update_item(self, item_id: str, fields: Mapping[str, Any]) -> Item:
        self._require_item(item_id)
        return self.store.update_item(item_id, fields)

    def delete_item(self, item_id: str, secret: str) -> None:
        """Delete after re-checking the secret of the session's role."""
        self._require_item(item_id)
        self.store.delete_item(item_id, secret, self._require_role())

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def add_transaction(self, item_id: str, draft: TransactionDraft) -> Transaction:
        self._require_item(item_id)
        self._ensure_serial_available(draft.serial_number)
        return self.store.add_transaction(item_id, draft)

    def update_transaction(
        self,
        item_id: str,
        transaction_id: str,
        fields: Mapping[str, Any],
    ) -> Transaction:
        self._require_item(item_id)
        for name in _SERIAL_FIELDS:
            if name in fields:
                self._ensure_serial_available(
                    clean_text(fields[name]), exclude=(item_id, transaction_id)
                )
        return self.store.update_transaction(item_id, transaction_id, fields)

    def delete_transaction(self, item_id: str, transaction_id: str) -> None:
        self._require_item(item_id)
        self.store.delete_transaction(item_id, transaction_id)

    def used_serial_numbers(self) -> frozenset[str]:
        self._require_role()
        return self.selector.used_serial_numbers()

    def _ensure_serial_available(
        self, serial: str, exclude: tuple[str, str] | None = None
    ) -> None:
        if is_duplicate_serial_number(serial, self.store.items(), exclude=exclude):
            logger.warning("serial_number_rejected", extra={"serial_number": serial})
            raise DuplicateSerialNumberError(serial.strip().upper())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def search(self, category: ItemType | str, query: str | None = "") -> ItemView:
        return self.selector.filter(self._require_category(category), query)

    def stats(self) -> dict[ItemType, CategoryTotals]:
        """Item count and summed stock for each category the role may see."""
        allowed = self.allowed_categories()
        totals = category_totals(self.store.items())
        return {category: totals[category] for category in allowed}

    def export(
        self,
        category: ItemType | str,
        query: str | None = "",
        directory: Path | str = ".",
    ) -> Path:
        """Write the filtered view of ``category`` to a dated CSV file."""
        parsed = self._require_category(category)
        view = self.selector.filter(parsed, query)
        headers = None
        labels = None
        if self._export_settings is not None:
            headers = (
                self._export_settings.part_headers
                if parsed is ItemType.PART
                else self._export_settings.product_headers
            )
            labels = self._export_settings.category_labels
        text = to_delimited_text(view, parsed, headers)
        name = export_filename(parsed, self._clock.now(), labels)
        return write_export(Path(directory) / name, text)

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    @property
    def backup_destination(self) -> BackupDestination:
        return self._backup_destination

    def save_backup_config(self, client_id: str, folder_id: str = "") -> BackupDestination:
        self._require_role()
        destination = BackupDestination(client_id=client_id, folder_id=folder_id)
        self.repository.save_backup_destination(destination)
        self._backup_destination = destination
        return destination

    def backup(self) -> str:
        """Upload a snapshot of the whole corpus; returns the file id."""
        self._require_role()
        payload = snapshot(self.store.items(), self._clock)
        return self.uploader.upload(payload, self._backup_destination)

    # ------------------------------------------------------------------
    # Boundary
    # ------------------------------------------------------------------

    def run(self, action: Callable[[], T]) -> ActionResult[T]:
        """
        Execute ``action`` and turn a ledger error into a single Notice.

        Only InventoryKernelError is converted; anything else is a bug and
        propagates.
        """
        role = self._role.value if self._role else None
        with LogContext.bind(correlation_id=uuid.uuid4().hex, actor_role=role):
            try:
                value = action()
            except InventoryKernelError as exc:
                logger.warning(
                    "action_failed",
                    extra={"error_code": exc.code},
                    exc_info=True,
                )
                return ActionResult(ok=False, notice=Notice(exc.code, str(exc)))
        return ActionResult(ok=True, value=value)
