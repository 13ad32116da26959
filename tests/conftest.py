"""
Pytest fixtures for the inventory ledger test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- Deterministic clock and static-secret credentials
- A fresh in-memory SQLite engine per test (``database``)
- Store, repository, configuration and application fixtures
"""

import json
import logging
from io import StringIO

import pytest

from inventory_config import get_active_config
from inventory_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.domain.credentials import Role, StaticSecretCheck
from inventory_kernel.domain.dtos import ItemDraft
from inventory_kernel.domain.values import ItemType
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from inventory_kernel.services.inventory_store import InventoryStore
from inventory_kernel.services.state_repository import StateRepository
from inventory_services.application import InventoryApplication

ADMIN_SECRET = "0000"
RESTRICTED_SECRET = "1111"
MEMORY_DATABASE_URL = "sqlite:///:memory:"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, store):
            store.create_item(...)
            logs = captured_logs()
            assert any(r["message"] == "item_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def credentials():
    return StaticSecretCheck({Role.ADMIN: ADMIN_SECRET, Role.RESTRICTED: RESTRICTED_SECRET})


@pytest.fixture
def store(credentials, deterministic_clock):
    """An empty store with the default initial-quantity remark."""
    return InventoryStore(credentials, deterministic_clock)


@pytest.fixture
def part_draft():
    return ItemDraft(type=ItemType.PART, name="widget", code="x1", drawing_number="dwg-01")


@pytest.fixture
def product_draft():
    return ItemDraft(type=ItemType.PRODUCT, name="controller", code="p100")


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def database():
    """Fresh in-memory SQLite engine with tables created; disposed afterwards."""
    reset_engine()
    init_engine_from_url(MEMORY_DATABASE_URL)
    create_tables()
    yield get_session_factory()
    reset_engine()


@pytest.fixture
def repository(database, deterministic_clock):
    return StateRepository(database, clock=deterministic_clock)


# =============================================================================
# Application fixtures
# =============================================================================


@pytest.fixture
def config_file(tmp_path):
    """User config overlay pointing storage and backups at the test sandbox."""
    path = tmp_path / "inventory.yaml"
    path.write_text(
        "storage:\n"
        f"  database_url: \"{MEMORY_DATABASE_URL}\"\n"
        "backup:\n"
        f"  directory: \"{(tmp_path / 'backups').as_posix()}\"\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config(config_file):
    return get_active_config(config_file)


@pytest.fixture
def app(config, deterministic_clock):
    """Application opened on a fresh in-memory database; not logged in."""
    reset_engine()
    application = InventoryApplication.open(config, clock=deterministic_clock)
    yield application
    reset_engine()


@pytest.fixture
def admin_app(app):
    app.login(ADMIN_SECRET)
    return app


@pytest.fixture
def restricted_app(app):
    app.login(RESTRICTED_SECRET)
    return app
