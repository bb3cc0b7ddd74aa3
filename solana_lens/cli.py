"""
SolanaLens CLI
Real-time Solana program analytics, anomaly detection, and network intelligence
"""

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from typing import List, Optional
import structlog

from solana_lens.dashboard.terminal import print_snapshot, start_dashboard
from solana_lens.models.ledger import ProgramInvocation
from solana_lens.services.analytics_engine import AnalyticsEngine
from solana_lens.services.programs import get_program_label
from solana_lens.services.solana_client import LAMPORTS_PER_SOL, SolanaClient, SolanaRpcError
from solana_lens.utils.config import settings
from solana_lens.utils.logging import configure_logging

logger = structlog.get_logger()


def pad_str(s: str, width: int) -> str:
    return s[:width] if len(s) >= width else s + " " * (width - len(s))


def format_num(n: float) -> str:
    return f"{n:,.2f}".rstrip("0").rstrip(".")


def positive_int(value: str) -> int:
    """argparse type for block windows and limits"""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def summarize_activity(activity: List[ProgramInvocation]) -> dict:
    """Aggregate figures printed under the `analyze` table"""
    count = len(activity)
    return {
        "total_fees": sum(a.fee for a in activity),
        "success_rate": sum(1 for a in activity if a.success) / count * 100 if count else 0.0,
        "avg_inner": sum(a.inner_instructions for a in activity) / count if count else 0.0,
        "unique_accounts": len({acc for a in activity for acc in a.accounts}),
    }


async def cmd_snapshot(args: argparse.Namespace) -> int:
    if not args.json:
        await print_snapshot(args.rpc, args.blocks)
        return 0

    async with SolanaClient(args.rpc) as client:
        snapshot = await AnalyticsEngine(client).take_snapshot(args.blocks)
    print(snapshot.model_dump_json(indent=2))
    return 0


async def cmd_watch(args: argparse.Namespace) -> int:
    await start_dashboard(args.rpc, args.interval, args.blocks)
    return 0


async def cmd_analyze(args: argparse.Namespace) -> int:
    print(f"\nAnalyzing program: {get_program_label(args.program_id)}")
    print(f"Program ID: {args.program_id}\n")

    async with SolanaClient(args.rpc) as client:
        activity = await client.get_program_activity(args.program_id, args.limit)

    if not activity:
        print("No recent activity found for this program.")
        return 0

    print(f"Found {len(activity)} recent transactions:\n")
    print(
        pad_str("Signature", 20)
        + pad_str("Slot", 12)
        + pad_str("Fee (SOL)", 12)
        + pad_str("Status", 10)
        + pad_str("Inner Ix", 10)
        + "Time"
    )
    print("─" * 80)

    for inv in activity:
        time = (
            datetime.fromtimestamp(inv.block_time, timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            if inv.block_time else "unknown"
        )
        print(
            pad_str(inv.signature[:16] + "...", 20)
            + pad_str(str(inv.slot), 12)
            + pad_str(f"{inv.fee:.6f}", 12)
            + pad_str("OK" if inv.success else "FAIL", 10)
            + pad_str(str(inv.inner_instructions), 10)
            + time
        )

    summary = summarize_activity(activity)
    print("─" * 80)
    print(f"Total Fees:      {summary['total_fees']:.6f} SOL")
    print(f"Success Rate:    {summary['success_rate']:.1f}%")
    print(f"Avg Inner Ix:    {summary['avg_inner']:.1f}")
    print(f"Unique Accounts: {summary['unique_accounts']}")
    return 0


async def cmd_account(args: argparse.Namespace) -> int:
    async with SolanaClient(args.rpc) as client:
        info = await client.get_account_info(args.address)

    if not info:
        print("Account not found.")
        return 1

    print(f"\nAccount: {args.address}")
    print(f"Owner:      {get_program_label(info.owner)}")
    print(f"Balance:    {info.lamports / LAMPORTS_PER_SOL:.9f} SOL")
    print(f"Executable: {str(info.executable).lower()}")
    print(f"Data Size:  {info.data_size} bytes")
    return 0


async def cmd_supply(args: argparse.Namespace) -> int:
    async with SolanaClient(args.rpc) as client:
        supply = await client.get_supply_info()

    print("\nSOL Supply:")
    print(f"  Total:           {format_num(supply.total)} SOL")
    print(f"  Circulating:     {format_num(supply.circulating)} SOL")
    print(f"  Non-Circulating: {format_num(supply.non_circulating)} SOL")
    return 0


async def cmd_stats(args: argparse.Namespace) -> int:
    async with SolanaClient(args.rpc) as client:
        stats = await client.get_network_stats()

    print("\nSolana Network Stats:")
    print(f"  Current Slot:   {stats.current_slot:,}")
    print(f"  Block Height:   {stats.block_height:,}")
    print(f"  Epoch:          {stats.epoch_info.epoch}")
    print(f"  Epoch Progress: {stats.epoch_info.progress * 100:.1f}%")
    print(f"  TPS:            {stats.tps:g}")
    print(f"  Validators:     {stats.validator_count}")
    if stats.epoch_info.transaction_count:
        print(f"  Total Tx Count: {stats.epoch_info.transaction_count:,}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from solana_lens.api.main import create_app

    logger.info("api_server_starting", host=args.host, port=args.port)
    uvicorn.run(create_app(args.rpc), host=args.host, port=args.port, log_level=settings.LOG_LEVEL.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solana-lens",
        description="Real-time Solana program analytics, anomaly detection, and network intelligence",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {settings.APP_VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    def with_rpc(p: argparse.ArgumentParser) -> argparse.ArgumentParser:
        p.add_argument("-r", "--rpc", default=None, help="Solana RPC URL")
        return p

    watch = with_rpc(sub.add_parser("watch", help="Start the live terminal dashboard"))
    watch.add_argument("-i", "--interval", type=float, default=settings.REFRESH_INTERVAL_SECONDS,
                       help="Refresh interval in seconds")
    watch.add_argument("-b", "--blocks", type=positive_int, default=settings.DEFAULT_BLOCK_WINDOW,
                       help="Number of recent blocks to analyze")
    watch.set_defaults(handler=cmd_watch)

    snapshot = with_rpc(sub.add_parser("snapshot", help="Take a one-time network snapshot"))
    snapshot.add_argument("-b", "--blocks", type=positive_int, default=settings.DEFAULT_BLOCK_WINDOW,
                          help="Number of recent blocks to analyze")
    snapshot.add_argument("--json", action="store_true", help="Print the snapshot as JSON")
    snapshot.set_defaults(handler=cmd_snapshot)

    analyze = with_rpc(sub.add_parser("analyze", help="Analyze a specific Solana program"))
    analyze.add_argument("program_id", help="Program ID to analyze")
    analyze.add_argument("-l", "--limit", type=positive_int, default=25,
                         help="Number of recent transactions to fetch")
    analyze.set_defaults(handler=cmd_analyze)

    account = with_rpc(sub.add_parser("account", help="Look up a Solana account"))
    account.add_argument("address", help="Account address")
    account.set_defaults(handler=cmd_account)

    serve = with_rpc(sub.add_parser("serve", help="Start the REST API server"))
    serve.add_argument("-p", "--port", type=int, default=settings.API_PORT, help="Port to listen on")
    serve.add_argument("--host", default=settings.API_HOST, help="Interface to bind")
    serve.set_defaults(handler=cmd_serve)

    supply = with_rpc(sub.add_parser("supply", help="Show SOL supply information"))
    supply.set_defaults(handler=cmd_supply)

    stats = with_rpc(sub.add_parser("stats", help="Show current network statistics"))
    stats.set_defaults(handler=cmd_stats)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    if args.command == "serve":
        return cmd_serve(args)

    try:
        return asyncio.run(args.handler(args))
    except SolanaRpcError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n  SolanaLens shutting down...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
