"""Anomaly rules evaluated against every network snapshot"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Set

from solana_lens.models.analytics import (
    Anomaly,
    AnomalyType,
    BlockSummary,
    HistoricalDataPoint,
    ProgramRanking,
    Severity,
    utc_now,
)
from solana_lens.models.ledger import NetworkStats
from solana_lens.services.programs import get_program_label

FAILURE_RATE_THRESHOLD = 80.0
FAILURE_RATE_HIGH = 50.0
FAILURE_MIN_TRANSACTIONS = 10

TPS_SPIKE_RATIO = 2.0
TPS_SPIKE_HIGH_RATIO = 3.0
TPS_DROP_RATIO = 0.3
TPS_DROP_HIGH_RATIO = 0.1

LARGE_BLOCK_TX = 2000
LARGE_BLOCK_HIGH_TX = 5000
EMPTY_BLOCK_TX = 5

NEW_PROGRAM_MIN_HISTORY = 3
NEW_PROGRAM_LOOKBACK = 5

SURGE_MIN_HISTORY = 2
SURGE_MIN_PREVIOUS = 5
SURGE_RATIO = 3
SURGE_HIGH_RATIO = 10


@dataclass(frozen=True)
class RuleContext:
    """
    Everything a rule may look at

    `baseline_tps` and `history` reflect engine state from before
    the current round is recorded.
    """
    stats: NetworkStats
    block_summary: BlockSummary
    top_programs: Sequence[ProgramRanking]
    program_counts: Dict[str, int]
    baseline_tps: Optional[float]
    history: Sequence[HistoricalDataPoint]
    known_programs: FrozenSet[str] = frozenset()
    now: datetime = field(default_factory=utc_now)


AnomalyRule = Callable[[RuleContext], List[Anomaly]]


def high_failure_rate(ctx: RuleContext) -> List[Anomaly]:
    summary = ctx.block_summary
    if summary.success_rate >= FAILURE_RATE_THRESHOLD:
        return []
    # Tiny samples are too noisy to judge
    if summary.total_transactions <= FAILURE_MIN_TRANSACTIONS:
        return []

    return [Anomaly(
        type=AnomalyType.HIGH_FAILURE_RATE,
        severity=Severity.HIGH if summary.success_rate < FAILURE_RATE_HIGH else Severity.MEDIUM,
        message=(
            f"Transaction success rate is {summary.success_rate:.1f}% "
            f"(below {FAILURE_RATE_THRESHOLD:.0f}% threshold)"
        ),
        data={
            "success_rate": summary.success_rate,
            "total_transactions": summary.total_transactions,
        },
        timestamp=ctx.now,
    )]


def tps_deviation(ctx: RuleContext) -> List[Anomaly]:
    """Flag a spike or a drop relative to the baseline, never both"""
    baseline = ctx.baseline_tps
    if baseline is None or baseline <= 0:
        return []

    tps = ctx.stats.tps
    ratio = tps / baseline
    data = {"current_tps": tps, "baseline_tps": baseline, "ratio": ratio}

    if ratio > TPS_SPIKE_RATIO:
        return [Anomaly(
            type=AnomalyType.TPS_SPIKE,
            severity=Severity.HIGH if ratio > TPS_SPIKE_HIGH_RATIO else Severity.MEDIUM,
            message=f"TPS spike detected: {tps:g} ({ratio:.1f}x baseline of {baseline:.0f})",
            data=data,
            timestamp=ctx.now,
        )]
    if ratio < TPS_DROP_RATIO and tps > 0:
        return [Anomaly(
            type=AnomalyType.TPS_DROP,
            severity=Severity.HIGH if ratio < TPS_DROP_HIGH_RATIO else Severity.MEDIUM,
            message=f"TPS drop detected: {tps:g} ({ratio * 100:.0f}% of baseline {baseline:.0f})",
            data=data,
            timestamp=ctx.now,
        )]
    return []


def large_block(ctx: RuleContext) -> List[Anomaly]:
    avg = ctx.block_summary.avg_tx_per_block
    if avg <= LARGE_BLOCK_TX:
        return []
    return [Anomaly(
        type=AnomalyType.LARGE_BLOCK,
        severity=Severity.HIGH if avg > LARGE_BLOCK_HIGH_TX else Severity.LOW,
        message=f"Large blocks detected: avg {avg:.0f} tx/block",
        data={"avg_tx_per_block": avg},
        timestamp=ctx.now,
    )]


def empty_block(ctx: RuleContext) -> List[Anomaly]:
    summary = ctx.block_summary
    if summary.blocks_analyzed == 0 or summary.avg_tx_per_block >= EMPTY_BLOCK_TX:
        return []
    return [Anomaly(
        type=AnomalyType.EMPTY_BLOCK,
        severity=Severity.MEDIUM,
        message=f"Near-empty blocks: avg {summary.avg_tx_per_block:.1f} tx/block",
        data={"avg_tx_per_block": summary.avg_tx_per_block},
        timestamp=ctx.now,
    )]


def new_program_detected(ctx: RuleContext) -> List[Anomaly]:
    """One anomaly per program never seen by this engine before"""
    if len(ctx.history) <= NEW_PROGRAM_MIN_HISTORY:
        return []

    recently_seen: Set[str] = set()
    for point in ctx.history[-NEW_PROGRAM_LOOKBACK:]:
        recently_seen.update(point.program_counts)

    anomalies = []
    for program_id, count in ctx.program_counts.items():
        if program_id in recently_seen or program_id in ctx.known_programs:
            continue
        anomalies.append(Anomaly(
            type=AnomalyType.NEW_PROGRAM_DETECTED,
            severity=Severity.LOW,
            message=f"New program detected in recent blocks: {get_program_label(program_id)}",
            data={"program_id": program_id, "invocations": count},
            timestamp=ctx.now,
        ))
    return anomalies


def program_surge(ctx: RuleContext) -> List[Anomaly]:
    """Compare each program's count against the previous round only"""
    if len(ctx.history) <= SURGE_MIN_HISTORY:
        return []

    previous = ctx.history[-1].program_counts
    anomalies = []
    for program_id, count in ctx.program_counts.items():
        prev_count = previous.get(program_id, 0)
        if prev_count <= SURGE_MIN_PREVIOUS or count <= prev_count * SURGE_RATIO:
            continue
        anomalies.append(Anomaly(
            type=AnomalyType.PROGRAM_SURGE,
            severity=Severity.HIGH if count > prev_count * SURGE_HIGH_RATIO else Severity.MEDIUM,
            message=f"Surge in {get_program_label(program_id)}: {prev_count} → {count} invocations",
            data={
                "program_id": program_id,
                "previous_count": prev_count,
                "current_count": count,
            },
            timestamp=ctx.now,
        ))
    return anomalies


# Evaluation order is part of the output contract
ANOMALY_RULES: List[AnomalyRule] = [
    high_failure_rate,
    tps_deviation,
    large_block,
    empty_block,
    new_program_detected,
    program_surge,
]


def evaluate_rules(ctx: RuleContext, rules: Sequence[AnomalyRule] = ANOMALY_RULES) -> List[Anomaly]:
    """Run every rule in order and concatenate their findings"""
    anomalies: List[Anomaly] = []
    for rule in rules:
        anomalies.extend(rule(ctx))
    return anomalies
