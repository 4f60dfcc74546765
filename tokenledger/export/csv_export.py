"""CSV export for token prices and portfolio valuations.

Generates CSV files with metadata comment lines carrying the export
title, generation time, and caller where relevant.

"""

from __future__ import annotations

import csv
import io
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tokenledger.portfolio.valuation import PortfolioValuation


def export_prices_csv(
    prices: list[tuple[str, float]],
    output_path: str | None = None,
) -> str:
    """Export token prices to CSV format.

    Args:
        prices: (symbol, price) pairs, e.g. from ``get_all_token_prices``.
        output_path: File path to write. If None, returns CSV string.

    Returns:
        The CSV content as a string, or file path if output_path given.

    """
    output = io.StringIO()
    _write_metadata_header(output, "Token Prices Export")

    writer = csv.DictWriter(output, fieldnames=["symbol", "price"])
    writer.writeheader()
    for symbol, price in prices:
        writer.writerow({"symbol": symbol, "price": price})

    return _finish(output, output_path)


def export_portfolio_csv(
    valuation: PortfolioValuation,
    caller: str,
    output_path: str | None = None,
) -> str:
    """Export a caller's portfolio valuation to CSV format.

    Writes one row per priced holding. The total is carried in the
    metadata header.

    Args:
        valuation: Valuation returned by ``get_portfolio_value``.
        caller: Caller identity the valuation belongs to.
        output_path: File path to write. If None, returns CSV string.

    Returns:
        The CSV content as a string, or file path if output_path given.

    """
    output = io.StringIO()
    _write_metadata_header(
        output,
        "Portfolio Valuation Export",
        extra=f"Caller: {caller} | Total Value: {valuation.total_value}",
    )

    writer = csv.DictWriter(output, fieldnames=["symbol", "amount", "value"])
    writer.writeheader()
    for holding in valuation.holdings:
        writer.writerow(
            {
                "symbol": holding.symbol,
                "amount": holding.amount,
                "value": holding.value,
            }
        )

    return _finish(output, output_path)


def _finish(output: io.StringIO, output_path: str | None) -> str:
    content = output.getvalue()
    if output_path:
        Path(output_path).write_text(content, encoding="utf-8")
        return output_path
    return content


def _write_metadata_header(
    output: io.StringIO,
    title: str,
    extra: str = "",
) -> None:
    """Write metadata comment lines at the top of a CSV export.

    Args:
        output: StringIO buffer to write to.
        title: Export title.
        extra: Optional additional metadata line.

    """
    now = datetime.now(tz=UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    output.write(f"# {title}\n")
    output.write(f"# Generated: {now}\n")
    if extra:
        output.write(f"# {extra}\n")
