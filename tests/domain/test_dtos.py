"""Item and Transaction records: normalization and the persisted wire shape."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from inventory_kernel.domain.dtos import (
    BackupDestination,
    Item,
    ItemDraft,
    Transaction,
    TransactionDraft,
)
from inventory_kernel.domain.values import ItemType, TransactionType
from inventory_kernel.exceptions import InvalidFieldError

WHEN = datetime(2024, 1, 1, 12, tzinfo=UTC)


class TestTransaction:

    def test_string_inputs_are_normalized(self):
        txn = Transaction(id="t-1", type="purchase", quantity="5", date="2024-01-01T12:00:00Z")
        assert txn.type is TransactionType.PURCHASE
        assert txn.quantity == 5
        assert txn.date == WHEN

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(InvalidFieldError):
            Transaction(id="t-1", type=TransactionType.PURCHASE, quantity=0, date=WHEN)

    def test_signed_quantity(self):
        txn = Transaction(id="t-1", type=TransactionType.CONSUMPTION, quantity=2, date=WHEN)
        assert txn.signed_quantity == -2

    def test_serial_number_omitted_when_blank(self):
        txn = Transaction(id="t-1", type=TransactionType.PURCHASE, quantity=1, date=WHEN)
        assert "serialNumber" not in txn.to_dict()

    def test_wire_shape(self):
        txn = Transaction(
            id="t-1",
            type=TransactionType.CONSUMPTION,
            quantity=1,
            date=WHEN,
            remarks=" shipped ",
            serial_number="SN-9",
        )
        assert txn.to_dict() == {
            "id": "t-1",
            "type": "consumption",
            "quantity": 1,
            "date": "2024-01-01T12:00:00.000Z",
            "remarks": "shipped",
            "serialNumber": "SN-9",
        }


class TestItem:

    def test_wire_shape_uses_camel_case(self):
        item = Item(
            id="item-1",
            type=ItemType.PART,
            code="X1",
            name="WIDGET",
            drawing_number="DWG-01",
            unit_price=Decimal("1500"),
            registration_date=WHEN,
        )
        data = item.to_dict()
        assert data["drawingNumber"] == "DWG-01"
        assert data["unitPrice"] == 1500
        assert data["registrationDate"] == "2024-01-01T12:00:00.000Z"
        assert data["transactions"] == []

    def test_from_dict_restores_item(self):
        txn = Transaction(id="t-1", type=TransactionType.PURCHASE, quantity=3, date=WHEN)
        item = Item(
            id="item-1",
            type=ItemType.PRODUCT,
            code="P1",
            name="BOX",
            spec="10x10",
            unit_price=Decimal("2.5"),
            registration_date=WHEN,
            transactions=(txn,),
        )
        assert Item.from_dict(item.to_dict()) == item

    def test_from_dict_tolerates_missing_optionals(self):
        item = Item.from_dict({"id": "item-1", "type": "part", "name": "BOLT"})
        assert item.code == ""
        assert item.unit_price == Decimal("0")
        assert item.transactions == ()

    def test_find_transaction(self):
        txn = Transaction(id="t-1", type=TransactionType.PURCHASE, quantity=3, date=WHEN)
        item = Item(id="item-1", type=ItemType.PART, code="", name="BOLT", transactions=[txn])
        assert item.find_transaction("t-1") is txn
        assert item.find_transaction("t-2") is None


class TestDrafts:

    def test_item_draft_uppercases_code_and_name_only(self):
        draft = ItemDraft(
            type="part",
            name=" widget ",
            code="x1",
            drawing_number=" dwg-01 ",
            spec=" m6 ",
            unit_price="abc",
        )
        assert draft.type is ItemType.PART
        assert draft.name == "WIDGET"
        assert draft.code == "X1"
        assert draft.drawing_number == "dwg-01"
        assert draft.spec == "m6"
        assert draft.unit_price == Decimal("0")

    def test_item_draft_negative_price_rejected(self):
        with pytest.raises(InvalidFieldError):
            ItemDraft(type=ItemType.PART, name="A", unit_price=-3)

    def test_transaction_draft_builds_with_id(self):
        draft = TransactionDraft(type="purchase", quantity=2, date=WHEN, serial_number=" s1 ")
        txn = draft.build("t-9")
        assert txn.id == "t-9"
        assert txn.serial_number == "s1"


class TestBackupDestination:

    def test_blank_client_id_is_not_configured(self):
        assert not BackupDestination(client_id="  ").is_configured

    def test_wire_shape(self):
        destination = BackupDestination(client_id="abc", folder_id="f1")
        assert destination.to_dict() == {"clientId": "abc", "folderId": "f1"}
        assert BackupDestination.from_dict(destination.to_dict()) == destination
