"""tokenledger sidecar entry point.

Communicates with the host process via stdin/stdout using
newline-delimited JSON messages. The host supplies the caller identity
in the request envelope; caller-scoped methods only ever touch that
caller's balances.

Protocol:
    Request:  {"id": "uuid", "method": "string", "caller": "string", "params": {}}
    Response: {"id": "uuid", "result": {}}
    Error:    {"id": "uuid", "error": {"message": "string", "kind": "string"}}
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tokenledger import log_config
from tokenledger.config import LedgerConfig, load_config
from tokenledger.db.connection import init_ledger_db
from tokenledger.db.snapshot_store import load_snapshot, save_snapshot
from tokenledger.export.csv_export import export_portfolio_csv, export_prices_csv
from tokenledger.export.json_export import export_snapshot_json, import_snapshot_json
from tokenledger.ledger.prices import PriceRecord
from tokenledger.service import LedgerService

logger = logging.getLogger(__name__)


class MissingCallerError(ValueError):
    """A caller-scoped method was called without a caller identity."""

    kind = "MissingCaller"


@dataclass
class RequestContext:
    """Per-request state handed to every handler.

    Attributes:
        service: The ledger service owning all state.
        caller: Caller identity from the request envelope, if any.
        db_path: Configured snapshot database, if persistence is enabled.

    """

    service: LedgerService
    caller: object = None
    db_path: Path | None = None

    def require_caller(self) -> str:
        """Return the caller identity as a non-empty string.

        Raises:
            MissingCallerError: If the host sent no caller, an empty one,
                or one that is not a string.

        """
        if not isinstance(self.caller, str) or not self.caller:
            msg = f"This method requires a non-empty string caller, got {self.caller!r}"
            raise MissingCallerError(msg)
        return self.caller


def _record_to_dict(symbol: str, record: PriceRecord) -> dict[str, Any]:
    return {
        "symbol": symbol,
        "price": record.price,
        "created_at": record.created_at,
        "last_updated_at": record.last_updated_at,
    }


def _resolve_db_path(ctx: RequestContext, db_path: str | None) -> Path:
    if db_path:
        return Path(db_path)
    if ctx.db_path is None:
        msg = "No snapshot database configured; pass db_path"
        raise ValueError(msg)
    return ctx.db_path


# ── Handlers ──


def _handle_add_price(
    ctx: RequestContext, symbol: str, initial_price: float
) -> dict[str, Any]:
    record = ctx.service.add_token_price(symbol, initial_price)
    return _record_to_dict(symbol, record)


def _handle_update_price(ctx: RequestContext, symbol: str, price: float) -> None:
    ctx.service.update_price(symbol, price)


def _handle_get_price(ctx: RequestContext, symbol: str) -> dict[str, Any]:
    return _record_to_dict(symbol, ctx.service.get_price_record(symbol))


def _handle_list_prices(ctx: RequestContext) -> list[dict[str, Any]]:
    return [
        {"symbol": symbol, "price": price}
        for symbol, price in ctx.service.get_all_token_prices()
    ]


def _handle_update_balance(ctx: RequestContext, token: str, amount: float) -> None:
    ctx.service.update_balance(ctx.require_caller(), token, amount)


def _handle_get_balances(ctx: RequestContext) -> list[dict[str, Any]]:
    return [
        {"token": token, "amount": amount}
        for token, amount in ctx.service.get_balances(ctx.require_caller())
    ]


def _handle_portfolio_value(ctx: RequestContext) -> dict[str, Any]:
    return ctx.service.get_portfolio_value(ctx.require_caller()).to_dict()


def _handle_snapshot_save(
    ctx: RequestContext, db_path: str | None = None
) -> dict[str, Any]:
    path = _resolve_db_path(ctx, db_path)
    snapshot = ctx.service.snapshot()
    conn = init_ledger_db(path)
    try:
        save_snapshot(conn, snapshot)
    finally:
        conn.close()
    return {
        "db_path": str(path),
        "prices": len(snapshot.prices),
        "ledgers": len(snapshot.balances),
    }


def _handle_snapshot_restore(
    ctx: RequestContext, db_path: str | None = None
) -> dict[str, Any]:
    path = _resolve_db_path(ctx, db_path)
    conn = init_ledger_db(path)
    try:
        snapshot = load_snapshot(conn)
    finally:
        conn.close()
    ctx.service.restore(snapshot)
    return {
        "db_path": str(path),
        "prices": len(snapshot.prices),
        "ledgers": len(snapshot.balances),
    }


def _handle_export_snapshot_json(
    ctx: RequestContext, output_path: str | None = None
) -> str:
    return export_snapshot_json(ctx.service.snapshot(), output_path=output_path)


def _handle_import_snapshot_json(ctx: RequestContext, source: str) -> dict[str, Any]:
    snapshot = import_snapshot_json(source)
    ctx.service.restore(snapshot)
    return {"prices": len(snapshot.prices), "ledgers": len(snapshot.balances)}


def _handle_export_prices_csv(
    ctx: RequestContext, output_path: str | None = None
) -> str:
    return export_prices_csv(ctx.service.get_all_token_prices(), output_path=output_path)


def _handle_export_portfolio_csv(
    ctx: RequestContext, output_path: str | None = None
) -> str:
    caller = ctx.require_caller()
    valuation = ctx.service.get_portfolio_value(caller)
    return export_portfolio_csv(valuation, caller, output_path=output_path)


HANDLERS: dict[str, Callable[..., Any]] = {
    # Prices
    "prices.add": _handle_add_price,
    "prices.update": _handle_update_price,
    "prices.get": _handle_get_price,
    "prices.list": _handle_list_prices,
    # Balances (caller-scoped)
    "balances.update": _handle_update_balance,
    "balances.get": _handle_get_balances,
    # Portfolio (caller-scoped)
    "portfolio.value": _handle_portfolio_value,
    # Snapshot persistence
    "snapshot.save": _handle_snapshot_save,
    "snapshot.restore": _handle_snapshot_restore,
    # Export / import
    "export.snapshot_json": _handle_export_snapshot_json,
    "import.snapshot_json": _handle_import_snapshot_json,
    "export.prices_csv": _handle_export_prices_csv,
    "export.portfolio_csv": _handle_export_portfolio_csv,
}


def dispatch(method: str, params: dict[str, Any], ctx: RequestContext) -> Any:
    """Route a method call to the appropriate handler.

    Args:
        method: The method name (e.g., "prices.add").
        params: The parameters for the method.
        ctx: Service, caller identity, and persistence settings.

    Returns:
        The result of the method call.

    Raises:
        ValueError: If the method is not recognized.

    """
    if method not in HANDLERS:
        msg = f"Unknown method: {method}"
        raise ValueError(msg)
    return HANDLERS[method](ctx, **params)


def _error_kind(exc: Exception) -> str:
    return str(getattr(exc, "kind", type(exc).__name__))


def serve(service: LedgerService, db_path: Path | None = None) -> None:
    """Run the message loop until stdin is closed.

    Args:
        service: The ledger service to dispatch into.
        db_path: Snapshot database for the ``snapshot.*`` methods.

    """
    for raw_line in sys.stdin:
        stripped = raw_line.strip()
        if not stripped:
            continue

        request: dict[str, Any] = {}
        try:
            request = json.loads(stripped)
            request_id = request.get("id", "unknown")
            method = request["method"]
            params = request.get("params", {})
            ctx = RequestContext(
                service=service,
                caller=request.get("caller"),
                db_path=db_path,
            )
            result = dispatch(method, params, ctx)
            response: dict[str, Any] = {"id": request_id, "result": result}
        except Exception as exc:  # noqa: BLE001 — dispatcher must catch all errors and return them as JSON
            request_id = (
                request.get("id", "unknown") if isinstance(request, dict) else "unknown"
            )
            logger.warning("Request %s failed: %s", request_id, exc)
            response = {
                "id": request_id,
                "error": {
                    "message": str(exc),
                    "kind": _error_kind(exc),
                    "traceback": traceback.format_exc(),
                },
            }
        sys.stdout.write(json.dumps(response) + "\n")
        sys.stdout.flush()


def main(config: LedgerConfig | None = None) -> None:
    """Run the sidecar.

    Restores state from the snapshot database on start and saves it
    again once stdin is closed (or the loop is interrupted), when the
    config enables each step.

    Args:
        config: Settings to use. Defaults to ``load_config()``.

    """
    config = config if config is not None else load_config()
    log_config.setup(verbose=config.verbose)

    service = LedgerService()
    db_path = config.db_path

    if db_path is not None and config.restore_on_start and db_path.exists():
        conn = init_ledger_db(db_path)
        try:
            service.restore(load_snapshot(conn))
        finally:
            conn.close()

    try:
        serve(service, db_path=db_path)
    finally:
        if db_path is not None and config.save_on_exit:
            conn = init_ledger_db(db_path)
            try:
                save_snapshot(conn, service.snapshot())
            finally:
                conn.close()


if __name__ == "__main__":
    main()
