"""Vulture whitelist — references that appear unused but are called dynamically.

Vulture scans for unreachable code.  Items listed here are known false
positives: entry points invoked by setuptools, pytest fixtures consumed
via dependency injection, handlers looked up by method name, etc.

Usage:
    uv run vulture tokenledger tests vulture_whitelist.py
"""

# ── Entry points (called by setuptools console_scripts, not imported) ──
from tokenledger.main import main  # noqa: F401

# ── Pytest fixtures (injected by pytest, never called directly) ──
from tests.conftest import clock  # noqa: F401
from tests.conftest import ledger  # noqa: F401
from tests.conftest import registry  # noqa: F401
from tests.conftest import service  # noqa: F401

# ── Error kinds (read via getattr when building sidecar error responses) ──
from tokenledger.ledger.errors import LedgerError

LedgerError.kind  # noqa: B018
