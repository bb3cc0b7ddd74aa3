"""Health check endpoints"""

from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import structlog

from solana_lens.api.dependencies import get_client
from solana_lens.services.solana_client import SolanaClient

router = APIRouter()
logger = structlog.get_logger()


@router.get("/health")
async def health_check():
    """
    Health check endpoint for load balancers and monitoring
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "solana-lens"
    }


@router.get("/health/detailed")
async def detailed_health_check(client: SolanaClient = Depends(get_client)):
    """
    Detailed health check with RPC node status
    """
    rpc_status = await client.get_health()
    if not rpc_status["healthy"]:
        logger.warning("rpc_unhealthy", status=rpc_status["status"])

    return {
        "status": "healthy" if rpc_status["healthy"] else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "rpc": rpc_status
        }
    }
