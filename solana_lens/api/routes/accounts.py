"""Account endpoints"""

from fastapi import APIRouter, Depends, HTTPException
import structlog

from solana_lens.api.dependencies import get_client
from solana_lens.models.ledger import AccountActivity
from solana_lens.services.solana_client import SolanaClient

router = APIRouter()
logger = structlog.get_logger()


@router.get("/{address}", response_model=AccountActivity)
async def get_account(
    address: str,
    client: SolanaClient = Depends(get_client)
):
    """
    Balance, owner, and data size of an account
    """
    info = await client.get_account_info(address)
    if not info:
        logger.info("account_not_found", address=address)
        raise HTTPException(status_code=404, detail="Account not found")
    return info
