"""Ledger Data Models"""

from pydantic import BaseModel, Field
from typing import Optional, List


class EpochInfo(BaseModel):
    """Position of the cluster within the current epoch"""
    epoch: int
    slot_index: int
    slots_in_epoch: int
    absolute_slot: int
    transaction_count: Optional[int] = None

    class Config:
        frozen = True

    @property
    def progress(self) -> float:
        """Fraction of the epoch already elapsed (0.0 - 1.0)"""
        if self.slots_in_epoch <= 0:
            return 0.0
        return self.slot_index / self.slots_in_epoch


class NetworkStats(BaseModel):
    """Cluster-wide counters sampled in one fetch"""
    current_slot: int
    block_height: int
    epoch_info: EpochInfo
    tps: float  # estimated transactions/second
    validator_count: int

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "current_slot": 285000000,
                "block_height": 263000000,
                "epoch_info": {
                    "epoch": 660,
                    "slot_index": 216000,
                    "slots_in_epoch": 432000,
                    "absolute_slot": 285000000,
                    "transaction_count": 312000000000
                },
                "tps": 4100,
                "validator_count": 1450
            }
        }


class BlockProduction(BaseModel):
    """Transaction counts for one sampled block"""
    slot: int
    leader: str = ""  # resolving the leader needs an extra call
    num_transactions: int = Field(..., ge=0)
    num_successful: int = Field(..., ge=0)
    num_failed: int = Field(..., ge=0)
    block_time: Optional[int] = None

    class Config:
        frozen = True


class ProgramInvocation(BaseModel):
    """A single transaction touching a program"""
    signature: str
    program_id: str
    slot: int
    block_time: Optional[int] = None
    fee: float  # SOL
    success: bool
    accounts: List[str] = Field(default_factory=list)
    inner_instructions: int = 0


class AccountActivity(BaseModel):
    """Account state as reported by the node"""
    address: str
    lamports: int
    owner: str
    executable: bool
    data_size: int


class SupplyInfo(BaseModel):
    """SOL supply breakdown"""
    total: float
    circulating: float
    non_circulating: float
