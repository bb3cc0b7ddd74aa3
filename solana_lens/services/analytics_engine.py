"""Analytics Engine"""

from collections import deque
from typing import Optional, Dict, List, FrozenSet, Sequence
import structlog

from solana_lens.models.analytics import (
    BlockSummary,
    HistoricalDataPoint,
    NetworkSnapshot,
    ProgramRanking,
    utc_now,
)
from solana_lens.models.ledger import BlockProduction
from solana_lens.services.anomaly_rules import ANOMALY_RULES, AnomalyRule, RuleContext, evaluate_rules
from solana_lens.services.programs import resolve_label
from solana_lens.services.solana_client import SolanaClient, gather_or_cancel

logger = structlog.get_logger()

MAX_HISTORY_LENGTH = 100
TOP_PROGRAMS_LIMIT = 20
BASELINE_SMOOTHING = 0.1


def summarize_blocks(blocks: Sequence[BlockProduction]) -> BlockSummary:
    """
    Reduce sampled blocks to a single summary

    The success rate is pooled over all transactions rather than
    averaged per block, so small blocks do not skew it. An empty
    sample yields the all-zero summary.
    """
    if not blocks:
        return BlockSummary()

    total_tx = sum(b.num_transactions for b in blocks)
    total_success = sum(b.num_successful for b in blocks)

    return BlockSummary(
        blocks_analyzed=len(blocks),
        total_transactions=total_tx,
        success_rate=(total_success / total_tx) * 100 if total_tx > 0 else 0.0,
        avg_tx_per_block=total_tx / len(blocks),
        avg_fee_per_tx=0.0,  # needs per-transaction fee data
    )


def rank_programs(
    program_counts: Dict[str, int],
    limit: int = TOP_PROGRAMS_LIMIT
) -> List[ProgramRanking]:
    """
    Rank programs by invocation count

    Ties are broken by program id so the order is deterministic.
    """
    total = sum(program_counts.values())
    ordered = sorted(program_counts.items(), key=lambda item: (-item[1], item[0]))

    rankings = []
    for program_id, count in ordered[:limit]:
        label, category = resolve_label(program_id)
        rankings.append(ProgramRanking(
            program_id=program_id,
            label=label,
            category=category,
            invocation_count=count,
            share=(count / total) * 100 if total > 0 else 0.0,
        ))
    return rankings


class BaselineTracker:
    """Exponentially weighted moving average of observed TPS"""

    def __init__(self, alpha: float = BASELINE_SMOOTHING):
        self.alpha = alpha
        self.value: Optional[float] = None

    def update(self, observed: float) -> float:
        if self.value is None:
            self.value = float(observed)
        else:
            self.value = self.value * (1 - self.alpha) + observed * self.alpha
        return self.value


class HistoryRing:
    """Bounded FIFO of past snapshot statistics"""

    def __init__(self, capacity: int = MAX_HISTORY_LENGTH):
        self.capacity = capacity
        self._points: deque = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._points)

    def append(self, point: HistoricalDataPoint):
        self._points.append(point)

    def recent(self, n: int) -> List[HistoricalDataPoint]:
        if n <= 0:
            return []
        return list(self._points)[-n:]

    def snapshot(self) -> List[HistoricalDataPoint]:
        """Order-preserving deep copy; mutating it never touches the ring"""
        return [point.model_copy(deep=True) for point in self._points]


class AnalyticsEngine:
    """
    Turns sampled ledger data into ranked, anomaly-flagged snapshots

    One engine owns one baseline, one history ring and one set of
    known programs. It is not safe for concurrent take_snapshot
    calls; callers sharing an instance must serialize them.
    """

    def __init__(
        self,
        client: SolanaClient,
        history_length: int = MAX_HISTORY_LENGTH,
        rules: Sequence[AnomalyRule] = ANOMALY_RULES
    ):
        self.client = client
        self.rules = list(rules)
        self.history = HistoryRing(history_length)
        self.baseline = BaselineTracker()
        self._known_programs: set = set()

    @property
    def known_programs(self) -> FrozenSet[str]:
        return frozenset(self._known_programs)

    async def take_snapshot(self, num_blocks: int = 5) -> NetworkSnapshot:
        """
        Sample the network and produce an annotated snapshot

        Args:
            num_blocks: Number of most recent slots to sample

        Returns:
            NetworkSnapshot with rankings, block summary and anomalies

        Raises:
            ValueError: num_blocks is negative
            SolanaRpcError: any of the fetches failed; engine state is
                left untouched
        """
        if num_blocks < 0:
            raise ValueError("num_blocks must be non-negative")

        stats, blocks, fetched_counts = await gather_or_cancel(
            self.client.get_network_stats(),
            self.client.get_recent_block_production(num_blocks),
            self.client.get_top_programs_from_recent_blocks(num_blocks),
        )
        program_counts = dict(fetched_counts)

        block_summary = summarize_blocks(blocks)
        top_programs = rank_programs(program_counts)

        now = utc_now()
        anomalies = evaluate_rules(
            RuleContext(
                stats=stats,
                block_summary=block_summary,
                top_programs=top_programs,
                program_counts=program_counts,
                baseline_tps=self.baseline.value,
                history=self.history.recent(self.history.capacity),
                known_programs=self.known_programs,
                now=now,
            ),
            self.rules,
        )

        self._record(stats.tps, block_summary, program_counts, now)

        logger.info(
            "snapshot_taken",
            blocks_analyzed=block_summary.blocks_analyzed,
            programs=len(program_counts),
            tps=stats.tps,
            baseline_tps=self.baseline.value,
            anomalies=len(anomalies)
        )

        return NetworkSnapshot(
            timestamp=now,
            stats=stats,
            top_programs=top_programs,
            block_summary=block_summary,
            anomalies=anomalies,
        )

    def _record(self, tps: float, block_summary: BlockSummary, program_counts: Dict[str, int], now):
        """Fold one round into history, baseline and known programs"""
        self.history.append(HistoricalDataPoint(
            timestamp=now,
            tps=tps,
            tx_count=block_summary.total_transactions,
            success_rate=block_summary.success_rate,
            program_counts=program_counts,
        ))
        self.baseline.update(tps)
        self._known_programs.update(program_counts)

    def get_history(self) -> List[HistoricalDataPoint]:
        return self.history.snapshot()

    def get_baseline_tps(self) -> Optional[float]:
        return self.baseline.value
