"""Terminal dashboard for live network analytics"""

import asyncio
import re
from datetime import datetime, timezone
from typing import Optional, List
import structlog

from solana_lens.models.analytics import Anomaly, NetworkSnapshot, ProgramRanking, Severity
from solana_lens.models.ledger import NetworkStats
from solana_lens.services.analytics_engine import AnalyticsEngine
from solana_lens.services.solana_client import SolanaClient, SolanaRpcError
from solana_lens.utils.config import settings

logger = structlog.get_logger()

BOX_WIDTH = 62
ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

COLORS = {
    "reset": "\x1b[0m",
    "bold": "\x1b[1m",
    "dim": "\x1b[2m",
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
}

CATEGORY_COLORS = {
    "Core": "blue",
    "Token": "green",
    "DEX": "magenta",
    "NFT": "yellow",
    "DeFi": "cyan",
}

SEVERITY_STYLE = {
    Severity.HIGH: ("red", "!!!"),
    Severity.MEDIUM: ("yellow", " ! "),
    Severity.LOW: ("cyan", " i "),
}


def color(name: str, text: str) -> str:
    return f"{COLORS[name]}{text}{COLORS['reset']}"


def visible_len(text: str) -> int:
    return len(ANSI_PATTERN.sub("", text))


def pad(text: str, width: int, align: str = "left") -> str:
    padding = " " * max(0, width - visible_len(text))
    return padding + text if align == "right" else text + padding


def format_number(n: float) -> str:
    if n >= 1_000_000_000:
        return f"{n / 1_000_000_000:.2f}B"
    if n >= 1_000_000:
        return f"{n / 1_000_000:.2f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:g}"


def box_top(title: str, width: int = BOX_WIDTH) -> str:
    remaining = width - (len(title) + 2) - 2
    left = remaining // 2
    right = remaining - left
    return (
        color("dim", "┌" + "─" * left)
        + f" {color('bold', title)} "
        + color("dim", "─" * right + "┐")
    )


def box_bottom(width: int = BOX_WIDTH) -> str:
    return color("dim", "└" + "─" * (width - 2) + "┘")


def box_line(content: str, width: int = BOX_WIDTH) -> str:
    padding = " " * max(0, width - 4 - visible_len(content))
    return color("dim", "│ ") + content + padding + color("dim", " │")


def render_header() -> str:
    banner = [
        "  ╔═══════════════════════════════════════════════════════════╗",
        "  ║        SolanaLens - Network Intelligence Dashboard        ║",
        "  ╚═══════════════════════════════════════════════════════════╝",
    ]
    return "\n".join([""] + [color("cyan", color("bold", line)) for line in banner] + [""])


def render_network_stats(stats: NetworkStats) -> str:
    progress = stats.epoch_info.progress
    bar_width = 40
    filled = round(progress * bar_width)
    bar = color("green", "█" * filled) + color("dim", "░" * (bar_width - filled))

    return "\n".join([
        box_top("Network Overview"),
        box_line(
            f"Slot: {color('green', format_number(stats.current_slot))}    "
            f"Block Height: {color('green', format_number(stats.block_height))}    "
            f"TPS: {color('yellow', f'{stats.tps:g}')}"
        ),
        box_line(
            f"Epoch: {color('cyan', str(stats.epoch_info.epoch))}    "
            f"Progress: {color('cyan', f'{progress * 100:.1f}%')}    "
            f"Validators: {color('green', format_number(stats.validator_count))}"
        ),
        box_line(f"Epoch Progress: {bar}"),
        box_bottom(),
    ])


def render_top_programs(programs: List[ProgramRanking], limit: int = 10) -> str:
    lines = [
        box_top("Top Programs (Recent Blocks)"),
        box_line(f"{pad('Program', 30)} {pad('Invocations', 14, 'right')} {pad('Share', 10, 'right')}"),
        box_line(color("dim", "─" * (BOX_WIDTH - 4))),
    ]
    for prog in programs[:limit]:
        label = prog.label if len(prog.label) <= 28 else prog.label[:25] + "..."
        label = color(CATEGORY_COLORS.get(prog.category, "white"), label)
        lines.append(box_line(
            f"{pad(label, 30)} "
            f"{pad(format_number(prog.invocation_count), 14, 'right')} "
            f"{pad(f'{prog.share:.1f}%', 10, 'right')}"
        ))
    lines.append(box_bottom())
    return "\n".join(lines)


def render_block_summary(snapshot: NetworkSnapshot) -> str:
    summary = snapshot.block_summary
    if summary.success_rate >= 95:
        rate_color = "green"
    elif summary.success_rate >= 80:
        rate_color = "yellow"
    else:
        rate_color = "red"

    return "\n".join([
        box_top("Block Analysis"),
        box_line(
            f"Blocks Analyzed: {color('cyan', str(summary.blocks_analyzed))}    "
            f"Total Tx: {color('green', format_number(summary.total_transactions))}    "
            f"Avg/Block: {color('yellow', f'{summary.avg_tx_per_block:.0f}')}"
        ),
        box_line(f"Success Rate: {color(rate_color, f'{summary.success_rate:.1f}%')}"),
        box_bottom(),
    ])


def render_anomalies(anomalies: List[Anomaly], limit: int = 5) -> str:
    lines = [box_top("Anomaly Detection")]
    if not anomalies:
        lines.append(box_line(color("green", "No anomalies detected, network operating normally")))
    for anomaly in anomalies[:limit]:
        style, icon = SEVERITY_STYLE[anomaly.severity]
        lines.append(box_line(f"{color(style, f'[{icon}]')} {anomaly.message[:50]}"))
    lines.append(box_bottom())
    return "\n".join(lines)


def render_footer(refresh_interval: float) -> str:
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    return color(
        "dim",
        f"  Last updated: {now} UTC  |  Refresh: {refresh_interval:g}s  |  Press Ctrl+C to exit"
    )


def render_snapshot(snapshot: NetworkSnapshot, refresh_interval: Optional[float] = None) -> str:
    """Render a complete dashboard frame"""
    interval = refresh_interval or settings.REFRESH_INTERVAL_SECONDS
    return "\n".join([
        render_header(),
        render_network_stats(snapshot.stats),
        "",
        render_top_programs(snapshot.top_programs),
        "",
        render_block_summary(snapshot),
        "",
        render_anomalies(snapshot.anomalies),
        "",
        render_footer(interval),
        "",
    ])


def clear_screen():
    print("\x1b[2J\x1b[H", end="")


async def refresh_dashboard(engine: AnalyticsEngine, num_blocks: int, refresh_interval: float) -> bool:
    """
    Take one snapshot and redraw

    A failed tick prints the error and returns False; the caller
    keeps polling.
    """
    try:
        snapshot = await engine.take_snapshot(num_blocks)
    except SolanaRpcError as e:
        logger.warning("dashboard_refresh_failed", error=str(e))
        error = e
    except Exception as e:
        # Malformed node responses surface as KeyError/ValidationError
        logger.exception("dashboard_refresh_error", error=str(e))
        error = e
    else:
        clear_screen()
        print(render_snapshot(snapshot, refresh_interval))
        return True

    print(color("red", f"  Error: {error}"))
    print(color("dim", "  Retrying on next interval..."))
    return False


async def start_dashboard(
    rpc_url: Optional[str] = None,
    refresh_interval: Optional[float] = None,
    num_blocks: Optional[int] = None
):
    """
    Redraw the dashboard on a fixed interval until cancelled

    Ticks run back to back: the next sleep only starts once the
    previous snapshot has finished, so slow RPC responses never
    overlap.
    """
    interval = refresh_interval or settings.REFRESH_INTERVAL_SECONDS
    window = num_blocks or settings.DEFAULT_BLOCK_WINDOW

    async with SolanaClient(rpc_url) as client:
        engine = AnalyticsEngine(client)

        clear_screen()
        print(render_header())
        print(color("yellow", "  Connecting to Solana network..."))

        while True:
            await refresh_dashboard(engine, window, interval)
            await asyncio.sleep(interval)


async def print_snapshot(rpc_url: Optional[str] = None, num_blocks: Optional[int] = None):
    """Render a single snapshot and return"""
    async with SolanaClient(rpc_url) as client:
        engine = AnalyticsEngine(client)
        print(render_header())
        print(color("yellow", "  Fetching Solana network data..."))

        snapshot = await engine.take_snapshot(num_blocks or settings.DEFAULT_BLOCK_WINDOW)
        clear_screen()
        print(render_snapshot(snapshot))
