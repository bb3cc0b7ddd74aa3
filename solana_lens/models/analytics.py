"""Analytics Data Models"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, List, Any
from datetime import datetime, timezone
from enum import Enum

from solana_lens.models.ledger import NetworkStats


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnomalyType(str, Enum):
    HIGH_FAILURE_RATE = "high_failure_rate"
    TPS_SPIKE = "tps_spike"
    TPS_DROP = "tps_drop"
    PROGRAM_SURGE = "program_surge"
    LARGE_BLOCK = "large_block"
    EMPTY_BLOCK = "empty_block"
    NEW_PROGRAM_DETECTED = "new_program_detected"


class BlockSummary(BaseModel):
    """Aggregate over the blocks sampled in one snapshot"""
    blocks_analyzed: int = Field(0, ge=0)
    total_transactions: int = Field(0, ge=0)
    success_rate: float = Field(0.0, ge=0, le=100)  # percentage
    avg_tx_per_block: float = Field(0.0, ge=0)
    # Placeholder: blocks carry no per-transaction fee data yet
    avg_fee_per_tx: float = Field(0.0, ge=0)

    class Config:
        frozen = True


class ProgramRanking(BaseModel):
    """One program's share of invocations in the sampled window"""
    program_id: str
    label: str
    category: str
    invocation_count: int
    share: float  # percentage of total

    class Config:
        frozen = True


class Anomaly(BaseModel):
    """A flagged network condition"""
    type: AnomalyType
    severity: Severity
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utc_now)


class HistoricalDataPoint(BaseModel):
    """Key statistics retained from a past snapshot"""
    timestamp: datetime = Field(default_factory=utc_now)
    tps: float
    tx_count: int
    success_rate: float
    program_counts: Dict[str, int] = Field(default_factory=dict)

    class Config:
        frozen = True


class NetworkSnapshot(BaseModel):
    """Composed result of one sampling round"""
    timestamp: datetime = Field(default_factory=utc_now)
    stats: NetworkStats
    top_programs: List[ProgramRanking]
    block_summary: BlockSummary
    anomalies: List[Anomaly]


class HistoryResponse(BaseModel):
    """Retained history together with the current baseline"""
    baseline_tps: Optional[float] = None
    known_programs: int = 0
    history: List[HistoricalDataPoint]
