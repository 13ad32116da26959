"""
InventoryApplication tests.

End-to-end through configuration, the SQLite state store, role gating,
the serial-number check, export and backup.
"""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from inventory_config import get_active_config
from inventory_kernel.db.engine import get_engine, reset_engine
from inventory_kernel.db.models import StateRecord
from inventory_kernel.domain.credentials import Role
from inventory_kernel.domain.dtos import ItemDraft, TransactionDraft
from inventory_kernel.domain.stock import CategoryTotals, stock_of
from inventory_kernel.domain.values import ItemType, TransactionType
from inventory_kernel.exceptions import (
    AuthorizationError,
    BackupNotConfiguredError,
    CategoryAccessDeniedError,
    DuplicateSerialNumberError,
    InvalidCredentialsError,
)
from inventory_services.application import InventoryApplication

WHEN = datetime(2024, 2, 1, 10, tzinfo=UTC)


def _serial_out(serial: str) -> TransactionDraft:
    return TransactionDraft(
        type=TransactionType.CONSUMPTION, quantity=1, date=WHEN, serial_number=serial
    )


class TestSession:

    def test_operations_require_login(self, app, part_draft):
        with pytest.raises(AuthorizationError):
            app.create_item(part_draft)
        with pytest.raises(AuthorizationError):
            app.search("product")

    def test_login_sets_role(self, app):
        assert app.login("0000") is Role.ADMIN
        assert app.role is Role.ADMIN

    def test_bad_secret(self, app):
        with pytest.raises(InvalidCredentialsError):
            app.login("4321")
        assert app.role is None

    def test_logout(self, admin_app):
        admin_app.logout()
        assert admin_app.role is None
        with pytest.raises(AuthorizationError):
            admin_app.stats()


class TestCategoryGating:

    def test_restricted_cannot_create_parts(self, restricted_app, part_draft):
        with pytest.raises(CategoryAccessDeniedError):
            restricted_app.create_item(part_draft)
        assert restricted_app.store.items() == ()

    def test_restricted_cannot_search_parts(self, restricted_app):
        with pytest.raises(CategoryAccessDeniedError):
            restricted_app.search("part")

    def test_restricted_cannot_touch_existing_part(self, admin_app, part_draft):
        part = admin_app.create_item(part_draft, 5)
        admin_app.logout()
        admin_app.login("1111")
        with pytest.raises(CategoryAccessDeniedError):
            admin_app.add_transaction(part.id, _serial_out(""))
        with pytest.raises(CategoryAccessDeniedError):
            admin_app.delete_item(part.id, "1111")

    def test_restricted_manages_products(self, restricted_app, product_draft):
        item = restricted_app.create_item(product_draft, 2)
        restricted_app.add_transaction(item.id, _serial_out("SN-1"))
        assert [i.id for i in restricted_app.search("product")] == [item.id]

    def test_stats_limited_to_visible_categories(self, admin_app, part_draft, product_draft):
        admin_app.create_item(part_draft, 3)
        admin_app.create_item(product_draft, 7)
        assert admin_app.stats() == {
            ItemType.PART: CategoryTotals(1, 3),
            ItemType.PRODUCT: CategoryTotals(1, 7),
        }
        admin_app.logout()
        admin_app.login("1111")
        assert admin_app.stats() == {ItemType.PRODUCT: CategoryTotals(1, 7)}


class TestSerialNumbers:

    def test_duplicate_serial_rejected_across_items(self, admin_app, product_draft):
        first = admin_app.create_item(product_draft, 5)
        second = admin_app.create_item(ItemDraft(type=ItemType.PRODUCT, name="other"), 5)
        admin_app.add_transaction(first.id, _serial_out("sn-100"))

        with pytest.raises(DuplicateSerialNumberError):
            admin_app.add_transaction(second.id, _serial_out("SN-100"))
        assert stock_of(admin_app.store.get_item(second.id)) == 5

    def test_editing_keeps_own_serial(self, admin_app, product_draft):
        item = admin_app.create_item(product_draft, 5)
        txn = admin_app.add_transaction(item.id, _serial_out("SN-1"))
        updated = admin_app.update_transaction(
            item.id, txn.id, {"serialNumber": "sn-1", "remarks": "recount"}
        )
        assert updated.remarks == "recount"

    def test_editing_to_taken_serial_rejected(self, admin_app, product_draft):
        item = admin_app.create_item(product_draft, 5)
        admin_app.add_transaction(item.id, _serial_out("SN-1"))
        other = admin_app.add_transaction(item.id, _serial_out("SN-2"))
        with pytest.raises(DuplicateSerialNumberError):
            admin_app.update_transaction(item.id, other.id, {"serial_number": "SN-1"})

    def test_used_serial_numbers(self, admin_app, product_draft):
        item = admin_app.create_item(product_draft, 5)
        admin_app.add_transaction(item.id, _serial_out("ab-1"))
        assert admin_app.used_serial_numbers() == frozenset({"AB-1"})


class TestPersistence:

    def test_every_mutation_is_flushed(self, admin_app, part_draft):
        item = admin_app.create_item(part_draft, 3)
        assert admin_app.repository.load_items() == admin_app.store.items()

        admin_app.add_transaction(item.id, _serial_out(""))
        assert stock_of(admin_app.repository.load_items()[0]) == 2

        admin_app.delete_item(item.id, "0000")
        assert admin_app.repository.load_items() == ()

    def test_reopen_restores_corpus(self, tmp_path, deterministic_clock, part_draft):
        config_path = tmp_path / "file.yaml"
        config_path.write_text(
            f'storage:\n  database_url: "sqlite:///{(tmp_path / "inv.db").as_posix()}"\n',
            encoding="utf-8",
        )
        config = get_active_config(config_path)

        first = InventoryApplication.open(config, clock=deterministic_clock)
        first.login("0000")
        created = first.create_item(part_draft, 4)
        reset_engine()

        second = InventoryApplication.open(config, clock=deterministic_clock)
        second.login("0000")
        assert [i.id for i in second.search("part")] == [created.id]
        assert stock_of(second.store.get_item(created.id)) == 4
        reset_engine()


class TestExportAndBackup:

    def test_export_writes_dated_file(self, admin_app, tmp_path):
        admin_app.create_item(ItemDraft(type=ItemType.PART, name="widget", code="x1"), 3)
        path = admin_app.export("part", "", tmp_path)

        assert path.name == "parts_inventory_2024-01-01.csv"
        assert '"X1","WIDGET","-","3"' in path.read_text(encoding="utf-8-sig")

    def test_export_applies_query(self, admin_app, part_draft, tmp_path):
        admin_app.create_item(part_draft, 3)
        admin_app.create_item(ItemDraft(type=ItemType.PART, name="gear", code="g1"))
        text = admin_app.export("part", "gea", tmp_path).read_text(encoding="utf-8-sig")
        assert "GEAR" in text
        assert "WIDGET" not in text

    def test_backup_requires_configuration(self, admin_app):
        with pytest.raises(BackupNotConfiguredError):
            admin_app.backup()

    def test_backup_after_configuring(self, admin_app, product_draft, config):
        admin_app.create_item(product_draft, 1)
        admin_app.save_backup_config("local-client", "nightly")
        admin_app.backup()

        backup_file = Path(config.backup.directory) / "nightly" / config.backup.file_name
        written = json.loads(backup_file.read_text(encoding="utf-8"))
        assert written["backupDate"] == "2024-01-01T12:00:00.000Z"
        assert len(written["inventory"]) == 1

    def test_backup_config_persisted(self, admin_app):
        admin_app.save_backup_config(" client-9 ", "")
        assert admin_app.repository.load_backup_destination().client_id == "client-9"


class TestRun:

    def test_failure_becomes_notice(self, admin_app, part_draft):
        admin_app.create_item(part_draft)
        result = admin_app.run(lambda: admin_app.create_item(part_draft))

        assert not result.ok
        assert result.notice.code == "DUPLICATE_CODE"
        assert "code" in result.notice.message

    def test_success_carries_value(self, admin_app, part_draft):
        result = admin_app.run(lambda: admin_app.create_item(part_draft))
        assert result.ok
        assert result.notice is None
        assert result.value.name == "WIDGET"

    def test_failure_logged_with_correlation_id(self, admin_app, captured_logs):
        admin_app.run(lambda: admin_app.delete_item("item-missing", "0000"))
        failed = [r for r in captured_logs() if r["message"] == "action_failed"]
        assert failed[0]["error_code"] == "ITEM_NOT_FOUND"
        assert failed[0]["actor_role"] == "admin"
        assert "correlation_id" in failed[0]

    def test_failed_flush_becomes_notice_and_rolls_back(self, admin_app, part_draft):
        StateRecord.__table__.drop(get_engine())
        result = admin_app.run(lambda: admin_app.create_item(part_draft))

        assert not result.ok
        assert result.notice.code == "PERSISTENCE_FAILED"
        assert admin_app.store.items() == ()

    def test_programming_errors_propagate(self, admin_app):
        def broken():
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            admin_app.run(broken)
