"""Runtime configuration read from environment variables.

Variables:
    TOKENLEDGER_DATA_DIR: Data directory (default ``~/.tokenledger/data``).
    TOKENLEDGER_DB_PATH: Snapshot database path (default
        ``<data_dir>/ledger.duckdb``). Empty or ``:memory:`` disables
        persistence.
    TOKENLEDGER_VERBOSE: Enable DEBUG logging.
    TOKENLEDGER_RESTORE_ON_START: Restore state from the database on start.
    TOKENLEDGER_SAVE_ON_EXIT: Save state to the database when stdin closes.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_DATA_DIR = Path.home() / ".tokenledger" / "data"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class LedgerConfig:
    """Sidecar settings.

    Attributes:
        data_dir: Directory for persistent files.
        db_path: Snapshot database file, or None for no persistence.
        verbose: Log at DEBUG instead of INFO.
        restore_on_start: Load the stored snapshot at startup.
        save_on_exit: Store a snapshot when the message loop ends.

    """

    data_dir: Path = _DEFAULT_DATA_DIR
    db_path: Path | None = None
    verbose: bool = False
    restore_on_start: bool = True
    save_on_exit: bool = True


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    msg = f"{name} must be a boolean flag, got '{raw}'"
    raise ValueError(msg)


def load_config(environ: Mapping[str, str] | None = None) -> LedgerConfig:
    """Build a config from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        The resolved configuration.

    Raises:
        ValueError: If a boolean variable holds an unrecognised value.

    """
    env = os.environ if environ is None else environ

    data_dir = Path(env.get("TOKENLEDGER_DATA_DIR") or _DEFAULT_DATA_DIR).expanduser()

    raw_db = env.get("TOKENLEDGER_DB_PATH")
    db_path: Path | None
    if raw_db is None:
        db_path = data_dir / "ledger.duckdb"
    elif raw_db.strip() in {"", ":memory:"}:
        db_path = None
    else:
        db_path = Path(raw_db).expanduser()

    return LedgerConfig(
        data_dir=data_dir,
        db_path=db_path,
        verbose=_parse_bool("TOKENLEDGER_VERBOSE", env.get("TOKENLEDGER_VERBOSE"), False),
        restore_on_start=_parse_bool(
            "TOKENLEDGER_RESTORE_ON_START",
            env.get("TOKENLEDGER_RESTORE_ON_START"),
            True,
        ),
        save_on_exit=_parse_bool(
            "TOKENLEDGER_SAVE_ON_EXIT",
            env.get("TOKENLEDGER_SAVE_ON_EXIT"),
            True,
        ),
    )
