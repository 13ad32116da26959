"""
inventory_services.backup -- Backup payload and upsert-by-name transport.

Responsibility:
    Serialize the whole corpus into a point-in-time backup payload and
    deliver it to a file-storage destination under a fixed file name,
    overwriting the previous backup in place when one exists.

Architecture position:
    Services layer. ``snapshot`` is a pure mapping over the store's
    current tuple. ``BackupUploader`` depends only on the
    ``FileStorageClient`` protocol; ``DirectoryFileStorage`` is the local
    implementation used offline and in tests.

Invariants:
    - ATOMIC_SNAPSHOT: a payload is built from one corpus tuple, so it
      never mixes pre- and post-mutation state.
    - Re-running a backup replaces the same named file; it never creates
      a second copy in the same folder.

Failure modes:
    - BackupNotConfiguredError  -- blank client id, nothing attempted.
    - BackupAuthenticationError -- the client refused the credentials.
    - BackupUploadError         -- lookup, create or update failed.
    All are TransportError. No retries; the store is never touched.
"""

from __future__ import annotations

import json
import os
import tempfile
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.dtos import BackupDestination, Item
from inventory_kernel.domain.values import format_timestamp, parse_timestamp
from inventory_kernel.exceptions import (
    BackupAuthenticationError,
    BackupNotConfiguredError,
    BackupUploadError,
    InventoryKernelError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.backup")

DEFAULT_BACKUP_FILE_NAME = "inventory_full_backup.json"
BACKUP_MIME_TYPE = "application/json"


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BackupPayload:
    """The full corpus plus the instant it was captured."""

    inventory: tuple[Item, ...]
    backup_date: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "inventory", tuple(self.inventory))
        object.__setattr__(self, "backup_date", parse_timestamp(self.backup_date, "backupDate"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "inventory": [item.to_dict() for item in self.inventory],
            "backupDate": format_timestamp(self.backup_date),
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BackupPayload:
        return cls(
            inventory=tuple(Item.from_dict(entry) for entry in data["inventory"]),
            backup_date=data["backupDate"],
        )


def snapshot(items: Iterable[Item], clock: Clock) -> BackupPayload:
    """Capture ``items`` (one corpus tuple) with the clock's current time."""
    return BackupPayload(inventory=tuple(items), backup_date=clock.now())


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class FileStorageClient(Protocol):
    """Minimal file-storage capability needed for upsert-by-name."""

    def authenticate(self, client_id: str) -> None:
        """Raise if ``client_id`` cannot be used against this storage."""
        ...

    def find_file(self, name: str, folder_id: str = "") -> str | None:
        """Id of the file called ``name`` in the folder, or None."""
        ...

    def create_file(
        self, name: str, content: bytes, mime_type: str, folder_id: str = ""
    ) -> str:
        ...

    def update_file(self, file_id: str, content: bytes, mime_type: str) -> None:
        ...


class DirectoryFileStorage:
    """
    FileStorageClient over a local directory.

    A folder id names a subdirectory of ``root``; file ids are paths
    relative to ``root``. Authentication succeeds when the target
    directory exists (it is created on demand) and is writable.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _folder(self, folder_id: str) -> Path:
        folder = (self.root / folder_id).resolve() if folder_id else self.root.resolve()
        if self.root.resolve() not in (folder, *folder.parents):
            raise ValueError(f"folder id escapes the backup root: {folder_id}")
        return folder

    def authenticate(self, client_id: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=self.root, prefix=".write_test_", delete=True):
            pass

    def find_file(self, name: str, folder_id: str = "") -> str | None:
        path = self._folder(folder_id) / name
        if path.is_file():
            return str(path.relative_to(self.root.resolve()))
        return None

    def create_file(
        self, name: str, content: bytes, mime_type: str, folder_id: str = ""
    ) -> str:
        folder = self._folder(folder_id)
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / name
        _atomic_write(path, content)
        return str(path.relative_to(self.root.resolve()))

    def update_file(self, file_id: str, content: bytes, mime_type: str) -> None:
        path = self.root.resolve() / file_id
        if not path.is_file():
            raise FileNotFoundError(file_id)
        _atomic_write(path, content)


def _atomic_write(path: Path, content: bytes) -> None:
    tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    tmp.write_bytes(content)
    os.replace(tmp, path)


class BackupUploader:
    """
    Uploads backup payloads with an upsert-by-name policy.

    Contract:
        ``upload`` either leaves exactly one file named ``file_name`` in the
        destination folder holding the payload, or raises a TransportError.
    """

    def __init__(self, client: FileStorageClient, file_name: str = DEFAULT_BACKUP_FILE_NAME):
        self._client = client
        self.file_name = file_name

    def upload(self, payload: BackupPayload, destination: BackupDestination) -> str:
        """Deliver ``payload``; returns the id of the written file."""
        if not destination.is_configured:
            raise BackupNotConfiguredError()

        try:
            self._client.authenticate(destination.client_id)
        except InventoryKernelError:
            raise
        except Exception as exc:
            logger.warning("backup_authentication_failed", exc_info=True)
            raise BackupAuthenticationError(str(exc)) from exc

        content = payload.to_json().encode("utf-8")
        try:
            file_id = self._client.find_file(self.file_name, destination.folder_id)
            if file_id is not None:
                self._client.update_file(file_id, content, BACKUP_MIME_TYPE)
                action = "updated"
            else:
                file_id = self._client.create_file(
                    self.file_name, content, BACKUP_MIME_TYPE, destination.folder_id
                )
                action = "created"
        except InventoryKernelError:
            raise
        except Exception as exc:
            logger.warning(
                "backup_upload_failed",
                extra={"file_name": self.file_name},
                exc_info=True,
            )
            raise BackupUploadError(self.file_name, str(exc)) from exc

        logger.info(
            "backup_uploaded",
            extra={
                "file_name": self.file_name,
                "file_id": file_id,
                "action": action,
                "item_count": len(payload.inventory),
                "size": len(content),
            },
        )
        return file_id
