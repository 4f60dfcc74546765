"""JSON export and import of ledger snapshots.

Produces a JSON document holding both stores plus a metadata block,
and reads such documents back into a ``LedgerSnapshot``.

"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from tokenledger.ledger.snapshot import LedgerSnapshot

FORMAT_VERSION = "1.0"


def export_snapshot_json(
    snapshot: LedgerSnapshot,
    output_path: str | None = None,
) -> str:
    """Export a ledger snapshot to JSON format.

    Args:
        snapshot: Snapshot to export.
        output_path: File path to write. If None, returns JSON string.

    Returns:
        JSON string, or file path if output_path given.

    """
    now = datetime.now(tz=UTC).isoformat()

    export_data: dict[str, Any] = {
        "metadata": {
            "export_date": now,
            "format_version": FORMAT_VERSION,
            "source": "tokenledger",
            "prices_count": len(snapshot.prices),
            "ledgers_count": len(snapshot.balances),
        },
        **snapshot.to_dict(),
    }

    content = json.dumps(export_data, indent=2)

    if output_path:
        Path(output_path).write_text(content, encoding="utf-8")
        return output_path
    return content


def import_snapshot_json(source: str) -> LedgerSnapshot:
    """Read a snapshot produced by ``export_snapshot_json``.

    Args:
        source: A JSON string, or a path to a JSON file.

    Returns:
        The decoded snapshot.

    Raises:
        ValueError: If the document has an unsupported format version.

    """
    text = source
    if not source.lstrip().startswith("{"):
        text = Path(source).read_text(encoding="utf-8")

    data = json.loads(text)
    version = data.get("metadata", {}).get("format_version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        msg = f"Unsupported snapshot format_version '{version}'"
        raise ValueError(msg)
    return LedgerSnapshot.from_dict(data)
