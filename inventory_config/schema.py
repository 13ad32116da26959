"""
InventoryConfig schema.

Frozen dataclasses for the effective configuration. YAML sections are
parsed into these types by the loader; nothing else in the system reads
YAML.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StorageSettings:
    """Where persisted state lives and under which keys."""

    database_url: str
    items_key: str
    backup_config_key: str


@dataclass(frozen=True)
class SecuritySettings:
    """Static shared secrets, one per role."""

    admin_secret: str
    restricted_secret: str

    def __repr__(self) -> str:
        return "SecuritySettings(admin_secret='***', restricted_secret='***')"


@dataclass(frozen=True)
class LedgerSettings:
    """Ledger behaviour that is a matter of wording, not invariants."""

    initial_quantity_remark: str


@dataclass(frozen=True)
class BackupSettings:
    """Backup file naming and the local destination root."""

    file_name: str
    directory: str


@dataclass(frozen=True)
class ExportSettings:
    """Column headers and file-name labels for delimited exports."""

    category_labels: dict[str, str] = field(default_factory=dict)
    part_headers: tuple[str, ...] = ()
    product_headers: tuple[str, ...] = ()


@dataclass(frozen=True)
class InventoryConfig:
    """The effective configuration, produced by get_active_config()."""

    storage: StorageSettings
    security: SecuritySettings
    ledger: LedgerSettings
    backup: BackupSettings
    export: ExportSettings
    checksum: str = ""
