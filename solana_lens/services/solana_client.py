"""Solana RPC Client"""

import asyncio
import base64
import itertools
from typing import Optional, Dict, Any, List
import httpx
import structlog

from solana_lens.models.ledger import (
    AccountActivity,
    BlockProduction,
    EpochInfo,
    NetworkStats,
    ProgramInvocation,
    SupplyInfo,
)
from solana_lens.utils.config import settings

logger = structlog.get_logger()

LAMPORTS_PER_SOL = 1_000_000_000


async def gather_or_cancel(*aws):
    """
    Like asyncio.gather, but a failure cancels the remaining awaitables

    Every task is awaited before the first error is re-raised, so no
    sibling outlives the call or leaves an unretrieved exception.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class SolanaRpcError(Exception):
    """The node answered with a JSON-RPC error object"""

    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.method = method


class SourceUnavailableError(SolanaRpcError):
    """The node could not be reached or returned an unusable response"""


class SolanaClient:
    """
    Async client for the Solana JSON-RPC API

    Features:
    - Shared HTTP connection pool
    - Concurrent sub-requests where calls are independent
    - Typed results (pydantic models)

    Errors are never retried here; callers decide whether to try
    again on their next poll.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.rpc_url = rpc_url or settings.SOLANA_RPC_URL
        self.commitment = settings.RPC_COMMITMENT
        self.http = http_client or httpx.AsyncClient(timeout=settings.RPC_TIMEOUT_SECONDS)
        self._request_ids = itertools.count(1)

    async def __aenter__(self) -> "SolanaClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self):
        """Close the underlying HTTP connection pool"""
        await self.http.aclose()

    async def _rpc(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Issue a single JSON-RPC call

        Args:
            method: RPC method name
            params: Positional parameters

        Returns:
            The "result" member of the response

        Raises:
            SourceUnavailableError: transport failure or bad HTTP response
            SolanaRpcError: the node reported an error for this call
        """
        body = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params or [],
        }
        try:
            response = await self.http.post(self.rpc_url, json=body)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("rpc_unavailable", method=method, error=str(e))
            raise SourceUnavailableError(
                f"{method} failed: {e}", method=method
            ) from e

        if not isinstance(data, dict):
            raise SourceUnavailableError(f"{method} returned a malformed body", method=method)

        error = data.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise SolanaRpcError(message, code=code, method=method)

        return data.get("result")

    async def get_slot(self) -> int:
        return await self._rpc("getSlot", [{"commitment": self.commitment}])

    async def get_network_stats(self) -> NetworkStats:
        """Fetch cluster-wide counters and estimate current TPS"""
        commitment = {"commitment": self.commitment}
        slot, block_height, epoch_info, vote_accounts = await gather_or_cancel(
            self._rpc("getSlot", [commitment]),
            self._rpc("getBlockHeight", [commitment]),
            self._rpc("getEpochInfo", [commitment]),
            self._rpc("getVoteAccounts", [commitment]),
        )

        tps = await self._estimate_tps()

        return NetworkStats(
            current_slot=slot,
            block_height=block_height,
            epoch_info=EpochInfo(
                epoch=epoch_info["epoch"],
                slot_index=epoch_info["slotIndex"],
                slots_in_epoch=epoch_info["slotsInEpoch"],
                absolute_slot=epoch_info["absoluteSlot"],
                transaction_count=epoch_info.get("transactionCount"),
            ),
            tps=tps,
            validator_count=(
                len(vote_accounts.get("current", []))
                + len(vote_accounts.get("delinquent", []))
            ),
        )

    async def _estimate_tps(self) -> float:
        """
        Estimate TPS from recent performance samples

        Not every RPC provider serves performance samples; an
        unavailable sample set yields 0.
        """
        try:
            samples = await self._rpc(
                "getRecentPerformanceSamples",
                [settings.PERFORMANCE_SAMPLE_COUNT]
            )
        except SolanaRpcError as e:
            logger.warning("performance_samples_unavailable", error=str(e))
            return 0.0

        if not samples:
            return 0.0

        total_tx = sum(s.get("numTransactions", 0) for s in samples)
        total_slots = sum(s.get("numSlots", 0) for s in samples)
        total_seconds = total_slots * settings.SLOT_DURATION_SECONDS
        if total_seconds <= 0:
            return 0.0
        return float(round(total_tx / total_seconds))

    async def _get_block(self, slot: int, encoding: str) -> Optional[Dict[str, Any]]:
        """Fetch one block, or None when the slot has no retrievable block"""
        try:
            return await self._rpc("getBlock", [slot, {
                "encoding": encoding,
                "maxSupportedTransactionVersion": 0,
                "transactionDetails": "full",
                "rewards": False,
                "commitment": self.commitment,
            }])
        except SourceUnavailableError:
            raise
        except SolanaRpcError as e:
            logger.debug("block_unavailable", slot=slot, error=str(e))
            return None

    async def _get_recent_blocks(self, count: int, encoding: str) -> List[tuple]:
        """(slot, block) pairs for the newest `count` slots, newest first"""
        if count <= 0:
            return []
        current_slot = await self.get_slot()
        slots = [current_slot - i for i in range(count)]
        blocks = await gather_or_cancel(*(self._get_block(s, encoding) for s in slots))
        return [(slot, block) for slot, block in zip(slots, blocks) if block]

    async def get_recent_block_production(self, num_slots: int = 10) -> List[BlockProduction]:
        """
        Transaction counts for the most recent slots

        Slots without a retrievable block are omitted.
        """
        results = []
        for slot, block in await self._get_recent_blocks(num_slots, "json"):
            transactions = block.get("transactions") or []
            num_tx = len(transactions)
            num_failed = sum(
                1 for tx in transactions
                if tx.get("meta") is None or tx["meta"].get("err") is not None
            )
            results.append(BlockProduction(
                slot=slot,
                num_transactions=num_tx,
                num_successful=num_tx - num_failed,
                num_failed=num_failed,
                block_time=block.get("blockTime"),
            ))

        logger.debug("blocks_fetched", requested=num_slots, returned=len(results))
        return results

    async def get_top_programs_from_recent_blocks(self, num_blocks: int = 5) -> Dict[str, int]:
        """Count top-level instruction invocations per program"""
        program_counts: Dict[str, int] = {}
        for _, block in await self._get_recent_blocks(num_blocks, "jsonParsed"):
            for tx in block.get("transactions") or []:
                message = (tx.get("transaction") or {}).get("message") or {}
                for ix in message.get("instructions") or []:
                    program_id = ix.get("programId")
                    if program_id:
                        program_counts[program_id] = program_counts.get(program_id, 0) + 1

        return program_counts

    async def get_program_activity(
        self,
        program_id: str,
        limit: int = 50
    ) -> List[ProgramInvocation]:
        """
        Recent transactions that touched a program

        Args:
            program_id: Program address
            limit: Maximum number of signatures to look up

        Returns:
            Invocations in signature order (newest first)
        """
        signatures = await self._rpc(
            "getSignaturesForAddress",
            [program_id, {"limit": limit, "commitment": self.commitment}]
        ) or []

        invocations: List[ProgramInvocation] = []
        batch_size = max(1, settings.ACTIVITY_BATCH_SIZE)

        for start in range(0, len(signatures), batch_size):
            batch = signatures[start:start + batch_size]
            transactions = await gather_or_cancel(*(
                self._rpc("getTransaction", [sig["signature"], {
                    "encoding": "jsonParsed",
                    "maxSupportedTransactionVersion": 0,
                    "commitment": self.commitment,
                }])
                for sig in batch
            ))

            for sig, tx in zip(batch, transactions):
                if not tx:
                    continue
                meta = tx.get("meta") or {}
                message = (tx.get("transaction") or {}).get("message") or {}
                accounts = [
                    key["pubkey"] if isinstance(key, dict) else key
                    for key in message.get("accountKeys") or []
                ]
                inner_count = sum(
                    len(inner.get("instructions") or [])
                    for inner in meta.get("innerInstructions") or []
                )
                invocations.append(ProgramInvocation(
                    signature=sig["signature"],
                    program_id=program_id,
                    slot=sig["slot"],
                    block_time=sig.get("blockTime"),
                    fee=(meta.get("fee") or 0) / LAMPORTS_PER_SOL,
                    success=sig.get("err") is None,
                    accounts=accounts,
                    inner_instructions=inner_count,
                ))

        logger.info("program_activity_fetched", program_id=program_id, count=len(invocations))
        return invocations

    async def get_account_info(self, address: str) -> Optional[AccountActivity]:
        """
        Look up an account

        Returns:
            AccountActivity, or None if the account does not exist or
            the node rejects the address
        """
        try:
            result = await self._rpc(
                "getAccountInfo",
                [address, {"encoding": "base64", "commitment": self.commitment}]
            )
        except SourceUnavailableError:
            raise
        except SolanaRpcError as e:
            logger.warning("account_lookup_rejected", address=address, error=str(e))
            return None

        info = (result or {}).get("value")
        if not info:
            return None

        data = info.get("data") or ["", "base64"]
        raw = data[0] if isinstance(data, list) else data
        return AccountActivity(
            address=address,
            lamports=info["lamports"],
            owner=info["owner"],
            executable=info.get("executable", False),
            data_size=len(base64.b64decode(raw)) if raw else 0,
        )

    async def get_supply_info(self) -> SupplyInfo:
        result = await self._rpc(
            "getSupply",
            [{"commitment": self.commitment, "excludeNonCirculatingAccountsList": True}]
        )
        value = result["value"]
        return SupplyInfo(
            total=value["total"] / LAMPORTS_PER_SOL,
            circulating=value["circulating"] / LAMPORTS_PER_SOL,
            non_circulating=value["nonCirculating"] / LAMPORTS_PER_SOL,
        )

    async def get_health(self) -> dict:
        """Check node health"""
        try:
            status = await self._rpc("getHealth")
            return {
                "healthy": status == "ok",
                "status": status
            }
        except SolanaRpcError as e:
            return {
                "healthy": False,
                "status": "error",
                "error": str(e)
            }
