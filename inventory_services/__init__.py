"""
inventory_services -- Package init and public API.

Responsibility:
    Orchestration around the ledger kernel: role selection and category
    gating, CSV export, backup payload and transport, the application
    context and the command line.

Architecture position:
    Services -- the only layer that reads InventoryConfig and performs file
    or network I/O beyond the local state store.

    Dependency direction (enforced by tests/architecture/test_kernel_boundary.py):
        inventory_services/ -> inventory_kernel/  (allowed)
        inventory_services/ -> inventory_config/  (allowed)
        inventory_kernel/   -> inventory_services/ (FORBIDDEN)
"""

from inventory_services.application import ActionResult, InventoryApplication, Notice
from inventory_services.auth import RoleAuthority, credentials_from_config
from inventory_services.backup import (
    BackupPayload,
    BackupUploader,
    DirectoryFileStorage,
    FileStorageClient,
    snapshot,
)
from inventory_services.export import export_filename, to_delimited_text, write_export

__all__ = [
    "ActionResult",
    "BackupPayload",
    "BackupUploader",
    "DirectoryFileStorage",
    "FileStorageClient",
    "InventoryApplication",
    "Notice",
    "RoleAuthority",
    "credentials_from_config",
    "export_filename",
    "snapshot",
    "to_delimited_text",
    "write_export",
]
