"""
inventory_services.export -- Delimited-text export of a category view.

Responsibility:
    Render items as spreadsheet-friendly CSV (byte-order mark, every field
    double-quoted, CRLF line ends) with stock derived at render time, and
    name the resulting file after the category and date.

Architecture position:
    Services layer. Pure formatting over a sequence of Item records plus a
    thin file write; never touches the store.

Invariants:
    - STOCK_DERIVED: the stock column comes from ``stock_of`` at render time.
    - Rows appear in input order.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from pathlib import Path

from inventory_kernel.domain.dtos import Item
from inventory_kernel.domain.stock import stock_of
from inventory_kernel.domain.values import ItemType, parse_item_type
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.export")

BYTE_ORDER_MARK = "\ufeff"
MISSING_DRAWING_NUMBER = "-"

DEFAULT_HEADERS: dict[ItemType, tuple[str, ...]] = {
    ItemType.PART: ("Code", "Name", "Drawing Number", "Current Stock"),
    ItemType.PRODUCT: ("Code", "Product Name", "Current Stock"),
}

DEFAULT_LABELS: dict[ItemType, str] = {
    ItemType.PART: "parts_inventory",
    ItemType.PRODUCT: "products_inventory",
}


def _row(item: Item, category: ItemType) -> list[str]:
    stock = str(stock_of(item))
    if category is ItemType.PART:
        return [item.code, item.name, item.drawing_number or MISSING_DRAWING_NUMBER, stock]
    return [item.code, item.name, stock]


def to_delimited_text(
    items: Iterable[Item],
    category: ItemType | str,
    headers: Sequence[str] | None = None,
) -> str:
    """
    Render ``items`` as CSV text for ``category``.

    The first character is the UTF-8 byte-order mark so spreadsheet tools
    detect the encoding. Items are rendered with the column set of
    ``category``; callers pass an already filtered view.
    """
    parsed = parse_item_type(category)
    output = io.StringIO()
    output.write(BYTE_ORDER_MARK)
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    writer.writerow(list(headers) if headers is not None else DEFAULT_HEADERS[parsed])
    count = 0
    for item in items:
        writer.writerow(_row(item, parsed))
        count += 1
    logger.info("export_rendered", extra={"category": parsed.value, "row_count": count})
    return output.getvalue()


def export_filename(
    category: ItemType | str,
    as_of: date | datetime,
    labels: Mapping[str, str] | None = None,
) -> str:
    """``<category-label>_<YYYY-MM-DD>.csv``."""
    parsed = parse_item_type(category)
    if labels is not None and parsed.value in labels:
        label = labels[parsed.value]
    else:
        label = DEFAULT_LABELS[parsed]
    day = as_of.date() if isinstance(as_of, datetime) else as_of
    return f"{label}_{day.isoformat()}.csv"


def write_export(path: Path, text: str) -> Path:
    """Write rendered text as UTF-8; the BOM is already part of ``text``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the CRLF row terminators untranslated
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    logger.info("export_written", extra={"path": str(path), "size": len(text)})
    return path
