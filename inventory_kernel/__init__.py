"""
Inventory Kernel

An append-only stock ledger for purchased parts and manufactured products:
- Stock derived from movement history, never stored
- Case-insensitive code / drawing-number uniqueness
- Atomic, snapshot-based store mutations
- Local persisted state with fail-open loading
"""

__version__ = "0.1.0"
