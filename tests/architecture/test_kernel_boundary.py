"""
Kernel Boundary & Invariants Contract.

Tests that enforce the kernel's architectural boundaries:

1. inventory_kernel/** may NOT import inventory_services or
   inventory_config. The kernel never depends upward.

2. inventory_kernel/domain/** performs no I/O: it may not import the
   database layer, the services layer or SQLAlchemy.

3. The kernel invariants declaration is complete and non-empty.

4. Every name exported by inventory_kernel.db has a consumer outside the
   module that defines it.

These tests read source code via AST; they cannot break anything.
"""

import ast
import glob
import re
from pathlib import Path

from inventory_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    KernelInvariant,
)

ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(root: str) -> list[str]:
    """Return all .py files under ROOT/root."""
    return sorted(glob.glob(f"{ROOT / root}/**/*.py", recursive=True))


def _extract_imports(filepath: str) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    try:
        source = Path(filepath).read_text(encoding="utf-8")
        tree = ast.parse(source, filename=filepath)
    except (SyntaxError, UnicodeDecodeError):
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(root: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(root):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# Test: Kernel has no upward dependencies
# ---------------------------------------------------------------------------


class TestKernelNoUpwardDependencies:
    """inventory_kernel/** must not import inventory_services or inventory_config."""

    def test_kernel_files_found(self):
        assert _python_files("inventory_kernel")

    def test_kernel_does_not_import_forbidden_packages(self):
        violations = _violations("inventory_kernel", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation: inventory_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: Domain is pure
# ---------------------------------------------------------------------------


class TestDomainPurity:
    """inventory_kernel/domain/** is the functional core: no DB, no services."""

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "inventory_kernel.db",
        "inventory_kernel.services",
        "inventory_kernel.selectors",
    )

    def test_domain_has_no_io_imports(self):
        violations = _violations("inventory_kernel/domain", self.FORBIDDEN_PREFIXES)
        assert not violations, (
            "Domain purity violation: inventory_kernel/domain/** must not import "
            "I/O layers:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: Invariant declaration
# ---------------------------------------------------------------------------


class TestKernelInvariants:

    def test_declaration_complete(self):
        assert set(ALL_KERNEL_INVARIANTS) == set(KernelInvariant)
        assert len(ALL_KERNEL_INVARIANTS) >= 6

    def test_forbidden_imports_cover_upper_layers(self):
        assert set(FORBIDDEN_KERNEL_IMPORTS) == {"inventory_services", "inventory_config"}


# ---------------------------------------------------------------------------
# Test: Database exports have consumers
# ---------------------------------------------------------------------------


class TestDatabaseExportsUsed:
    """Every name exported by inventory_kernel.db is used beyond its definition."""

    def _referencing_files(self, name: str) -> list[str]:
        package_init = str(ROOT / "inventory_kernel" / "db" / "__init__.py")
        pattern = re.compile(rf"\b{re.escape(name)}\b")
        found = []
        for root in ("inventory_kernel", "inventory_config", "inventory_services", "tests"):
            for filepath in _python_files(root):
                if filepath == package_init:
                    continue
                if pattern.search(Path(filepath).read_text(encoding="utf-8")):
                    found.append(filepath)
        return found

    def test_every_export_has_a_consumer(self):
        import inventory_kernel.db as db

        unused = [name for name in db.__all__ if len(self._referencing_files(name)) < 2]
        assert not unused, f"Exported from inventory_kernel.db but never used: {unused}"
