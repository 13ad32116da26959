"""
Identifier generation for items and transactions.

Identifiers are opaque strings of the form
``<prefix>-<epoch-millis>-<sequence>-<random>``. The process-wide sequence
makes them unique within a running process; the clock and random parts
keep them unlikely to collide with identifiers minted by earlier runs
that are already in persisted state. They are not security tokens.
"""

import itertools
import secrets
import threading
import time

ITEM_PREFIX = "item"
TRANSACTION_PREFIX = "t"

_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def generate_id(prefix: str) -> str:
    """
    Generate an identifier with the given prefix.

    Args:
        prefix: Short tag naming the kind of record (``item``, ``t``).

    Returns:
        Identifier string, never equal to one returned earlier in this process.

    Example:
        >>> generate_id("item")
        'item-1718000000000-1-417'
    """
    with _sequence_lock:
        seq = next(_sequence)
    millis = time.time_ns() // 1_000_000
    return f"{prefix}-{millis}-{seq}-{secrets.randbelow(1000)}"
