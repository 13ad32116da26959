"""
InventoryStore -- Owner of the item corpus and its transaction histories.

Responsibility:
    Create, update and delete items and their transactions. The corpus is
    an immutable tuple of Item records (most recently created first);
    every mutation builds a new tuple under the writer lock, hands it to
    the listeners (the application registers the persistence flush as
    one) and swaps it in once they have all accepted it.

Architecture position:
    Kernel > Services -- imperative shell around the pure domain. Receives
    a Clock and a CredentialCheck by injection.

Invariants enforced:
    CODE_UNIQUE / DRAWING_NUMBER_UNIQUE -- checked at create_item only.
    TOTAL_OWNERSHIP  -- delete_item drops the item and its history together.
    ATOMIC_SNAPSHOT  -- readers see the old tuple or the new one, never a mix.

Failure modes:
    - MissingFieldError when create_item receives a blank name.
    - DuplicateCodeError / DuplicateDrawingNumberError on create_item.
    - InvalidCredentialsError on delete_item with the wrong secret.
    - ItemNotFoundError / TransactionNotFoundError for unknown ids.
    - Whatever a listener raises (PersistenceError from the flush).
    On any failure the corpus is unchanged.

Non-goals:
    - update_item does NOT re-run duplicate validation.
    - add_transaction does NOT check serial-number uniqueness.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.credentials import CredentialCheck, Role
from inventory_kernel.domain.dtos import Item, ItemDraft, Transaction, TransactionDraft
from inventory_kernel.domain.identifiers import (
    ITEM_PREFIX,
    TRANSACTION_PREFIX,
    generate_id,
)
from inventory_kernel.domain.merge import (
    ItemMerger,
    TransactionMerger,
    merge_item,
    merge_transaction,
)
from inventory_kernel.domain.validation import ensure_unique_identity
from inventory_kernel.domain.values import TransactionType, is_blank
from inventory_kernel.exceptions import (
    InvalidCredentialsError,
    InvalidFieldError,
    ItemNotFoundError,
    MissingFieldError,
    TransactionNotFoundError,
)
from inventory_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.inventory_store")

DEFAULT_INITIAL_QUANTITY_REMARK = "Initial quantity registration"

StoreListener = Callable[[tuple[Item, ...]], None]


class InventoryStore:
    """
    Single-writer store for the item corpus.

    Contract:
        All mutations go through this object. Each one either replaces
        the whole corpus tuple or raises without touching it.

    Guarantees:
        - ``items()`` returns an immutable snapshot; later mutations never
          show up inside a snapshot already handed out.
        - Listeners run before the swap, in registration order, while the
          writer lock is still held, so flushes happen in mutation order.
          A listener that raises leaves the corpus as it was.
    """

    def __init__(
        self,
        credentials: CredentialCheck,
        clock: Clock | None = None,
        items: Iterable[Item] = (),
        *,
        initial_quantity_remark: str = DEFAULT_INITIAL_QUANTITY_REMARK,
        item_merger: ItemMerger = merge_item,
        transaction_merger: TransactionMerger = merge_transaction,
        id_factory: Callable[[str], str] = generate_id,
    ):
        self._credentials = credentials
        self._clock = clock or SystemClock()
        self._items: tuple[Item, ...] = tuple(items)
        self._initial_quantity_remark = initial_quantity_remark
        self._merge_item = item_merger
        self._merge_transaction = transaction_merger
        self._new_id = id_factory
        self._lock = threading.RLock()
        self._listeners: list[StoreListener] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def items(self) -> tuple[Item, ...]:
        """Current corpus snapshot, most recently created first."""
        return self._items

    def get_item(self, item_id: str) -> Item:
        for item in self._items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError(item_id)

    def add_listener(self, listener: StoreListener) -> None:
        """Register a callback invoked with the new corpus before it is swapped in."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Item operations
    # ------------------------------------------------------------------

    def create_item(self, draft: ItemDraft, initial_quantity: int = 0) -> Item:
        """
        Register a new item at the head of the corpus.

        Preconditions:
            - draft.name is non-blank.
            - draft.code / draft.drawing_number (when non-blank) are unused.
            - initial_quantity >= 0.

        Postconditions:
            - The item has a fresh id and registration timestamp.
            - If initial_quantity > 0 it carries exactly one purchase
              transaction for that quantity with the fixed remark.

        Raises:
            MissingFieldError: blank name.
            InvalidFieldError: negative initial quantity.
            DuplicateCodeError / DuplicateDrawingNumberError: collision.
        """
        if is_blank(draft.name):
            raise MissingFieldError("name")
        if isinstance(initial_quantity, bool) or not isinstance(initial_quantity, int):
            raise InvalidFieldError(
                "initial_quantity", initial_quantity, "must be a whole number"
            )
        if initial_quantity < 0:
            raise InvalidFieldError(
                "initial_quantity", initial_quantity, "must not be negative"
            )

        with self._lock:
            current = self._items
            # INVARIANT: CODE_UNIQUE, DRAWING_NUMBER_UNIQUE
            ensure_unique_identity(draft.code, draft.drawing_number, current)

            now = self._clock.now()
            transactions: tuple[Transaction, ...] = ()
            if initial_quantity > 0:
                transactions = (
                    Transaction(
                        id=self._new_id(TRANSACTION_PREFIX),
                        type=TransactionType.PURCHASE,
                        quantity=initial_quantity,
                        date=now,
                        remarks=self._initial_quantity_remark,
                    ),
                )
            item = Item(
                id=self._new_id(ITEM_PREFIX),
                type=draft.type,
                code=draft.code,
                name=draft.name,
                drawing_number=draft.drawing_number,
                spec=draft.spec,
                unit_price=draft.unit_price,
                remarks=draft.remarks,
                registration_date=now,
                transactions=transactions,
            )
            self._commit((item, *current))

        logger.info(
            "item_created",
            extra={
                "item_id": item.id,
                "item_type": item.type.value,
                "code": item.code,
                "initial_quantity": initial_quantity,
            },
        )
        return item

    def delete_item(self, item_id: str, supplied_secret: str, role: Role) -> None:
        """
        Permanently remove an item and its whole history.

        Raises:
            InvalidCredentialsError: secret does not match ``role``.
            ItemNotFoundError: unknown id.
        """
        with LogContext.bind(item_id=item_id, actor_role=Role(role).value):
            if not self._credentials.verify(Role(role), supplied_secret):
                logger.warning("delete_rejected", extra={"reason": "invalid_secret"})
                raise InvalidCredentialsError("delete_item")

            with self._lock:
                current = self._items
                remaining = tuple(item for item in current if item.id != item_id)
                if len(remaining) == len(current):
                    raise ItemNotFoundError(item_id)
                self._commit(remaining)

            logger.info("item_deleted")

    def update_item(self, item_id: str, fields: Mapping[str, Any]) -> Item:
        """Merge ``fields`` into the item; unspecified fields stay as they are."""
        with self._lock:
            updated = self._replace_item(
                item_id, lambda item: self._merge_item(item, fields)
            )
        logger.info(
            "item_updated",
            extra={"item_id": item_id, "fields": sorted(fields)},
        )
        return updated

    # ------------------------------------------------------------------
    # Transaction operations
    # ------------------------------------------------------------------

    def add_transaction(self, item_id: str, draft: TransactionDraft) -> Transaction:
        """Append a new transaction to the end of the item's history."""
        with self._lock:
            txn = draft.build(self._new_id(TRANSACTION_PREFIX))
            self._replace_item(
                item_id,
                lambda item: _with_transactions(item, (*item.transactions, txn)),
            )
        logger.info(
            "transaction_added",
            extra={
                "item_id": item_id,
                "transaction_id": txn.id,
                "transaction_type": txn.type.value,
                "quantity": txn.quantity,
            },
        )
        return txn

    def update_transaction(
        self,
        item_id: str,
        transaction_id: str,
        fields: Mapping[str, Any],
    ) -> Transaction:
        """Merge ``fields`` into one transaction, keeping its position."""
        updated: list[Transaction] = []

        def _apply(item: Item) -> Item:
            txns = list(item.transactions)
            for index, txn in enumerate(txns):
                if txn.id == transaction_id:
                    txns[index] = self._merge_transaction(txn, fields)
                    updated.append(txns[index])
                    return _with_transactions(item, tuple(txns))
            raise TransactionNotFoundError(item_id, transaction_id)

        with self._lock:
            self._replace_item(item_id, _apply)
        logger.info(
            "transaction_updated",
            extra={
                "item_id": item_id,
                "transaction_id": transaction_id,
                "fields": sorted(fields),
            },
        )
        return updated[0]

    def delete_transaction(self, item_id: str, transaction_id: str) -> None:
        """Remove one transaction from the item's history."""

        def _apply(item: Item) -> Item:
            kept = tuple(t for t in item.transactions if t.id != transaction_id)
            if len(kept) == len(item.transactions):
                raise TransactionNotFoundError(item_id, transaction_id)
            return _with_transactions(item, kept)

        with self._lock:
            self._replace_item(item_id, _apply)
        logger.info(
            "transaction_deleted",
            extra={"item_id": item_id, "transaction_id": transaction_id},
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace_item(self, item_id: str, change: Callable[[Item], Item]) -> Item:
        """Build a corpus with one item changed and commit it. Lock must be held."""
        current = self._items
        for index, item in enumerate(current):
            if item.id == item_id:
                new_item = change(item)
                self._commit(current[:index] + (new_item,) + current[index + 1:])
                return new_item
        raise ItemNotFoundError(item_id)

    def _commit(self, new_items: tuple[Item, ...]) -> None:
        """
        Hand ``new_items`` to every listener, then swap it in.

        A listener that raises aborts the mutation: the corpus keeps its
        previous tuple and the error reaches the caller unchanged.
        """
        for listener in self._listeners:
            try:
                listener(new_items)
            except Exception:
                logger.warning(
                    "commit_aborted",
                    extra={"item_count": len(self._items)},
                    exc_info=True,
                )
                raise
        # INVARIANT: ATOMIC_SNAPSHOT -- one reference swap per mutation
        self._items = new_items


def _with_transactions(item: Item, transactions: tuple[Transaction, ...]) -> Item:
    return dataclasses.replace(item, transactions=transactions)
