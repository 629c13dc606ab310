#!/usr/bin/env python3
"""
Command-line interface for dexmetrics.

Usage:
    dexmetrics quote MTK 1.5
    dexmetrics metrics
    dexmetrics history 0xabc... --kind swap
    dexmetrics liquidity 0xabc...
    dexmetrics prefs --tolerance-bps 100 --deadline 30
    dexmetrics watch --publish
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import Any, Dict, List, Optional

from .config import ConfigManager, get_config
from .core.scheduler import MetricsCycle, RefreshScheduler, SnapshotStore, SummaryCycle
from .core.storage import PreferenceService, create_preference_store
from .errors import DexMetricsError
from .ledger import ReservesReader, Web3LedgerReader, fetch_user_transactions
from .metrics import format_metrics
from .models import PublishedSnapshot, SlippagePreference, TransactionKind
from .pricing import SwapQuoter, build_trade_request, format_fixed, format_units, slippage_warning
from .utils.nats import SnapshotPublisher

logger = logging.getLogger(__name__)


def _print_json(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, default=str))


def _readers(config: ConfigManager, chain: Optional[str]):
    reader_config = config.get_reader_config(chain)
    ledger = Web3LedgerReader.from_rpc_url(
        reader_config["rpc_url"],
        request_timeout=reader_config["request_timeout"],
        max_retries=reader_config["max_retries"],
        retry_delay=reader_config["retry_delay"],
    )
    reserves = ReservesReader(
        ledger.w3,
        reader_config["pool_address"],
        max_retries=reader_config["max_retries"],
        retry_delay=reader_config["retry_delay"],
    )
    return reader_config, ledger, reserves


async def _preferences(config: ConfigManager) -> PreferenceService:
    store = create_preference_store(config.storage)
    await store.connect()
    return PreferenceService(store)


def _quoter(config: ConfigManager, pair, store: Optional[SnapshotStore] = None) -> SwapQuoter:
    # Reserves older than one metrics refresh are flagged stale
    max_age = config.pool.METRICS_REFRESH_SECONDS
    if store is not None:
        return SwapQuoter.from_store(store, pair, fee_bps=config.pool.FEE_BPS, max_age_seconds=max_age)
    return SwapQuoter(pair, fee_bps=config.pool.FEE_BPS, max_age_seconds=max_age)


async def run_quote(args, config: ConfigManager) -> bool:
    pair = config.pool.token_pair()
    _, _, reserves_reader = _readers(config, args.chain)
    reserves = await reserves_reader.get_reserves()

    service = await _preferences(config)
    try:
        preference = await service.load()
    finally:
        await service.store.disconnect()
    if args.tolerance_bps is not None or args.deadline is not None:
        preference = SlippagePreference(
            tolerance_bps=preference.tolerance_bps if args.tolerance_bps is None else args.tolerance_bps,
            deadline_minutes=preference.deadline_minutes if args.deadline is None else args.deadline,
        )

    quoter = _quoter(config, pair)
    quote = quoter.quote(args.token, args.amount, reserves=reserves, preference=preference)
    request = build_trade_request(quote, preference, int(time.time()))

    token_in_is_a = pair.is_token_a(args.token)
    decimals_in = pair.decimals_for(token_in_is_a)
    decimals_out = pair.decimals_for(not token_in_is_a)
    _print_json(
        {
            "token_in": pair.symbol_a if token_in_is_a else pair.symbol_b,
            "token_out": pair.symbol_b if token_in_is_a else pair.symbol_a,
            "amount_in": format_units(quote.amount_in, decimals_in),
            "amount_out": format_units(quote.amount_out, decimals_out),
            "exchange_rate": format_fixed(quote.exchange_rate, 6),
            "price_impact_pct": format_fixed(quote.price_impact_pct, 2),
            "fee": format_units(quote.fee_amount, decimals_in),
            "minimum_received": format_units(quote.minimum_amount_out, decimals_out),
            "deadline": request.deadline,
            "slippage_tolerance_pct": str(preference.tolerance_percent),
            "slippage_warning": slippage_warning(preference.tolerance_bps),
        }
    )
    return True


async def run_metrics(args, config: ConfigManager) -> bool:
    reader_config, ledger, reserves_reader = _readers(config, args.chain)
    pair = config.pool.token_pair()
    cycle = MetricsCycle(
        ledger,
        reserves_reader,
        reader_config["pool_address"],
        pair,
        reader_config["window_blocks"],
        fee_bps=config.pool.FEE_BPS,
        price_history_points=config.pool.PRICE_HISTORY_POINTS,
    )
    scheduler = RefreshScheduler(cycle, config.pool.METRICS_REFRESH_SECONDS)
    result = await scheduler.refresh_once()
    if not result.success:
        logger.error(f"Metrics refresh failed: {result.error}")
        return False
    _print_json(format_metrics(result.snapshot.metrics, pair))
    return True


async def run_history(args, config: ConfigManager) -> bool:
    reader_config, ledger, _ = _readers(config, args.chain)
    kind = TransactionKind(args.kind) if args.kind else None
    transactions = await fetch_user_transactions(
        ledger,
        reader_config["pool_address"],
        args.user,
        history_blocks=reader_config["history_blocks"],
        kind=kind,
    )
    chain = reader_config["chain_name"]
    rows: List[Dict[str, Any]] = []
    for tx in transactions:
        row = {k: v for k, v in vars(tx).items() if v is not None}
        row["kind"] = tx.kind.value
        row["explorer_url"] = config.chains.get_explorer_tx_url(chain, tx.tx_hash)
        rows.append(row)
    _print_json({"user": args.user, "count": len(rows), "transactions": rows})
    return True


async def run_liquidity(args, config: ConfigManager) -> bool:
    _, _, reserves_reader = _readers(config, args.chain)
    position = await reserves_reader.get_user_liquidity(args.user)
    _print_json(
        {
            "user": args.user,
            "liquidity": format_units(position.amount, 18),
            "share_pct": format_fixed(position.share_percent, 2),
        }
    )
    return True


async def run_prefs(args, config: ConfigManager) -> bool:
    service = await _preferences(config)
    try:
        if args.reset:
            preference = await service.reset()
        elif args.tolerance_bps is not None or args.deadline is not None:
            preference = await service.update(args.tolerance_bps, args.deadline)
        else:
            preference = await service.load()
    finally:
        await service.store.disconnect()
    _print_json(
        {
            "tolerance_bps": preference.tolerance_bps,
            "tolerance_pct": str(preference.tolerance_percent),
            "deadline_minutes": preference.deadline_minutes,
            "warning": slippage_warning(preference.tolerance_bps),
        }
    )
    return True


async def run_watch(args, config: ConfigManager) -> bool:
    reader_config, ledger, reserves_reader = _readers(config, args.chain)
    pair = config.pool.token_pair()
    pool = reader_config["pool_address"]
    window_blocks = reader_config["window_blocks"]

    metrics_store = SnapshotStore("metrics")
    summary_store = SnapshotStore("summary")
    schedulers = [
        RefreshScheduler(
            MetricsCycle(
                ledger,
                reserves_reader,
                pool,
                pair,
                window_blocks,
                fee_bps=config.pool.FEE_BPS,
                price_history_points=config.pool.PRICE_HISTORY_POINTS,
            ),
            config.pool.METRICS_REFRESH_SECONDS,
            metrics_store,
        ),
        RefreshScheduler(
            SummaryCycle(ledger, reserves_reader, pool, pair, window_blocks),
            config.pool.SUMMARY_REFRESH_SECONDS,
            summary_store,
        ),
    ]

    def log_metrics(snapshot: PublishedSnapshot) -> None:
        formatted = format_metrics(snapshot.metrics, pair)
        logger.info(
            f"TVL {formatted['tvl']} | 24h volume {formatted['volume_24h']} | "
            f"fees {formatted['fees_24h']} | APR {formatted['apr']}% | "
            f"price {formatted['current_price']} ({formatted['price_change_24h']}%)"
        )

    metrics_store.subscribe(log_metrics)

    if args.quote:
        token, amount = args.quote
        quoter = _quoter(config, pair, metrics_store)
        token_in_is_a = pair.is_token_a(token)

        def log_quote(snapshot: PublishedSnapshot) -> None:
            try:
                quote = quoter.quote(token, amount)
            except DexMetricsError as e:
                logger.warning(f"Quote {amount} {token} failed: {e}")
                return
            logger.info(
                f"Quote {amount} {token} -> "
                f"{format_units(quote.amount_out, pair.decimals_for(not token_in_is_a))} "
                f"(impact {format_fixed(quote.price_impact_pct, 2)}%)"
            )

        metrics_store.subscribe(log_quote)

    publisher = None
    if args.publish or config.nats.NATS_ENABLED:
        publisher = SnapshotPublisher(config.nats, pool, pair)
        await publisher.aconnect()
        metrics_store.subscribe(publisher)
        summary_store.subscribe(publisher)

    for scheduler in schedulers:
        scheduler.start()
    try:
        if args.duration:
            await asyncio.sleep(args.duration)
        else:
            await asyncio.Event().wait()
    finally:
        for scheduler in schedulers:
            await scheduler.stop()
        if publisher is not None:
            await publisher.aclose()
    return True


COMMANDS = {
    "quote": run_quote,
    "metrics": run_metrics,
    "history": run_history,
    "liquidity": run_liquidity,
    "prefs": run_prefs,
    "watch": run_watch,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dexmetrics",
        description="Pool analytics and swap quoting for a constant-product AMM",
    )
    parser.add_argument("--chain", help="Chain name (defaults to DEFAULT_CHAIN)")
    parser.add_argument("--environment", help="Override ENVIRONMENT")
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Quote a swap against current reserves")
    quote.add_argument("token", help="Input token symbol or address")
    quote.add_argument("amount", help="Input amount in display units, e.g. 1.5")
    quote.add_argument("--tolerance-bps", type=int, help="Slippage tolerance override")
    quote.add_argument("--deadline", type=int, help="Deadline override in minutes")

    subparsers.add_parser("metrics", help="Compute 24h pool metrics once")

    history = subparsers.add_parser("history", help="Recent transactions of a user")
    history.add_argument("user", help="User address")
    history.add_argument("--kind", choices=[k.value for k in TransactionKind])

    liquidity = subparsers.add_parser("liquidity", help="LP position of a user")
    liquidity.add_argument("user", help="User address")

    prefs = subparsers.add_parser("prefs", help="Show or change slippage preferences")
    prefs.add_argument("--tolerance-bps", type=int)
    prefs.add_argument("--deadline", type=int, help="Deadline in minutes")
    prefs.add_argument("--reset", action="store_true", help="Restore defaults")

    watch = subparsers.add_parser("watch", help="Refresh metrics periodically")
    watch.add_argument("--publish", action="store_true", help="Publish snapshots to NATS")
    watch.add_argument("--duration", type=float, help="Stop after this many seconds")
    watch.add_argument(
        "--quote",
        nargs=2,
        metavar=("TOKEN", "AMOUNT"),
        help="Re-quote this swap against every published snapshot",
    )

    return parser


async def run(args) -> bool:
    config = get_config(environment=args.environment)
    return await COMMANDS[args.command](args, config)


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI function."""
    args = build_parser().parse_args(argv)
    try:
        success = asyncio.run(run(args))
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except DexMetricsError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(2)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
