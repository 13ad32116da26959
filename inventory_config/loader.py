"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads YAML files, overlays a user file on the packaged defaults and
parses the result into the typed ``inventory_config.schema`` dataclasses.
The public runtime entry point is ``inventory_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown sections or keys raise ``ValueError``; a typo never silently
  falls back to a default.
* Secrets must be YAML strings (an unquoted ``0000`` would load as the
  integer 0).
* Export header rows must match the column count of their category.
* ``compute_checksum`` produces a deterministic SHA-256 over the
  effective configuration.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structural problems  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    BackupSettings,
    ExportSettings,
    InventoryConfig,
    LedgerSettings,
    SecuritySettings,
    StorageSettings,
)

_SECTIONS: dict[str, type] = {
    "storage": StorageSettings,
    "security": SecuritySettings,
    "ledger": LedgerSettings,
    "backup": BackupSettings,
    "export": ExportSettings,
}

PART_COLUMN_COUNT = 4
PRODUCT_COLUMN_COUNT = 3


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def overlay(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Overlay ``override`` on ``base`` one section deep.

    Keys inside a section replace the default; sections absent from the
    override keep their defaults.
    """
    merged = {name: dict(values) for name, values in base.items()}
    for name, values in override.items():
        if name not in _SECTIONS:
            raise ValueError(f"Unknown configuration section: {name}")
        if not isinstance(values, dict):
            raise ValueError(f"Section {name} must be a mapping")
        merged.setdefault(name, {}).update(values)
    return merged


def _check_keys(section: str, values: dict[str, Any]) -> None:
    allowed = set(_SECTIONS[section].__dataclass_fields__) - {"checksum"}
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in section {section}: {sorted(unknown)}")
    missing = allowed - set(values)
    if missing:
        raise ValueError(f"Missing keys in section {section}: {sorted(missing)}")


def _require_string(section: str, key: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{section}.{key} must be a non-empty string")
    return value


def parse_config(data: dict[str, Any]) -> InventoryConfig:
    """Parse a merged configuration mapping into an InventoryConfig."""
    for section in _SECTIONS:
        if section not in data:
            raise ValueError(f"Missing configuration section: {section}")
        _check_keys(section, data[section])

    storage = StorageSettings(
        **{k: _require_string("storage", k, v) for k, v in data["storage"].items()}
    )
    security = SecuritySettings(
        **{k: _require_string("security", k, v) for k, v in data["security"].items()}
    )
    ledger = LedgerSettings(
        initial_quantity_remark=_require_string(
            "ledger", "initial_quantity_remark", data["ledger"]["initial_quantity_remark"]
        )
    )
    backup = BackupSettings(
        **{k: _require_string("backup", k, v) for k, v in data["backup"].items()}
    )

    export_data = data["export"]
    labels = export_data["category_labels"]
    if not isinstance(labels, dict) or set(labels) != {"part", "product"}:
        raise ValueError("export.category_labels must define exactly part and product")
    part_headers = tuple(str(h) for h in export_data["part_headers"])
    product_headers = tuple(str(h) for h in export_data["product_headers"])
    if len(part_headers) != PART_COLUMN_COUNT:
        raise ValueError(f"export.part_headers must have {PART_COLUMN_COUNT} columns")
    if len(product_headers) != PRODUCT_COLUMN_COUNT:
        raise ValueError(
            f"export.product_headers must have {PRODUCT_COLUMN_COUNT} columns"
        )
    export = ExportSettings(
        category_labels={k: str(v) for k, v in labels.items()},
        part_headers=part_headers,
        product_headers=product_headers,
    )

    return InventoryConfig(
        storage=storage,
        security=security,
        ledger=ledger,
        backup=backup,
        export=export,
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of the configuration mapping."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
