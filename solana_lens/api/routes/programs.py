"""Program endpoints"""

from fastapi import APIRouter, Depends, Query
import structlog

from solana_lens.api.dependencies import get_client
from solana_lens.services.analytics_engine import rank_programs
from solana_lens.services.programs import get_program_label, list_known_programs
from solana_lens.services.solana_client import SolanaClient
from solana_lens.utils.config import settings

router = APIRouter()
logger = structlog.get_logger()


@router.get("/top")
async def get_top_programs(
    blocks: int = Query(default=settings.DEFAULT_BLOCK_WINDOW, ge=1),
    client: SolanaClient = Depends(get_client)
):
    """
    Programs ranked by invocation count in the most recent blocks
    """
    num_blocks = min(blocks, settings.MAX_BLOCK_WINDOW)
    program_counts = await client.get_top_programs_from_recent_blocks(num_blocks)

    return {
        "blocks_analyzed": num_blocks,
        "total_invocations": sum(program_counts.values()),
        "programs": [r.model_dump() for r in rank_programs(program_counts)]
    }


@router.get("/known")
async def get_known_programs():
    """
    Labelled programs and their categories
    """
    return {"programs": list_known_programs()}


@router.get("/{program_id}/activity")
async def get_program_activity(
    program_id: str,
    limit: int = Query(default=25, ge=1),
    client: SolanaClient = Depends(get_client)
):
    """
    Recent transactions that invoked a program
    """
    activity = await client.get_program_activity(
        program_id,
        min(limit, settings.MAX_ACTIVITY_LIMIT)
    )
    return {
        "program_id": program_id,
        "label": get_program_label(program_id),
        "invocations": [a.model_dump() for a in activity]
    }
