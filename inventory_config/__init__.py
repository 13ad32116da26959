"""
inventory_config -- single public entrypoint for configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  The packaged ``defaults.yaml`` is always
    loaded; an optional user YAML file is overlaid on top of it.

Architecture position:
    Configuration layer.  Sits above ``inventory_kernel`` and below
    ``inventory_services``.  The kernel MUST NEVER import from here;
    services translate settings into constructor arguments.

Failure modes:
    - ``FileNotFoundError`` -- the user file does not exist.
    - ``yaml.YAMLError`` -- the user file is not valid YAML.
    - ``ValueError`` -- unknown/missing sections or keys, bad values.

Audit relevance:
    Every successful call emits a ``config_loaded`` log entry with the
    checksum of the effective configuration (secrets are never logged).
"""

from __future__ import annotations

import logging
from pathlib import Path

from inventory_config.loader import load_yaml_file, overlay, parse_config
from inventory_config.schema import (
    BackupSettings,
    ExportSettings,
    InventoryConfig,
    LedgerSettings,
    SecuritySettings,
    StorageSettings,
)

_logger = logging.getLogger("inventory_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(config_path: Path | str | None = None) -> InventoryConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Optional user YAML file overlaid on the defaults.

    Returns:
        The effective, validated InventoryConfig.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    source = "defaults"
    if config_path is not None:
        data = overlay(data, load_yaml_file(Path(config_path)))
        source = str(config_path)

    config = parse_config(data)
    _logger.info(
        "config_loaded",
        extra={
            "source": source,
            "checksum": config.checksum,
            "database_url": config.storage.database_url,
        },
    )
    return config


__all__ = [
    "BackupSettings",
    "ExportSettings",
    "InventoryConfig",
    "LedgerSettings",
    "SecuritySettings",
    "StorageSettings",
    "get_active_config",
]
