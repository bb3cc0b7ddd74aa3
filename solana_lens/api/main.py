"""
SolanaLens - Main API
Programmatic access to Solana network analytics and anomaly detection
"""

import asyncio
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog

from solana_lens.api.routes import accounts, health, network, programs, snapshot
from solana_lens.services.analytics_engine import AnalyticsEngine
from solana_lens.services.cache import CacheService
from solana_lens.services.solana_client import SolanaClient, SolanaRpcError, SourceUnavailableError
from solana_lens.utils.config import settings
from solana_lens.utils.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    configure_logging()

    client = SolanaClient(getattr(app.state, "rpc_url", None))
    logger.info("Starting SolanaLens API", rpc_url=client.rpc_url, environment=settings.ENVIRONMENT)

    app.state.client = client
    app.state.engine = AnalyticsEngine(client)
    app.state.snapshot_lock = asyncio.Lock()
    app.state.cache = CacheService()

    yield

    await client.close()
    await app.state.cache.close()
    logger.info("Shutting down SolanaLens API")


def create_app(rpc_url: Optional[str] = None) -> FastAPI:
    """
    Build the API application

    Args:
        rpc_url: Solana RPC endpoint, defaults to settings.SOLANA_RPC_URL
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Real-time Solana program analytics, anomaly detection, and network intelligence",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan
    )
    app.state.rpc_url = rpc_url

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SolanaRpcError)
    async def rpc_error_handler(request: Request, exc: SolanaRpcError):
        status_code = 503 if isinstance(exc, SourceUnavailableError) else 502
        logger.error(
            "rpc_request_failed",
            path=request.url.path,
            method=exc.method,
            code=exc.code,
            error=str(exc)
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(snapshot.router, prefix="/api", tags=["Analytics"])
    app.include_router(network.router, prefix="/api", tags=["Network"])
    app.include_router(programs.router, prefix="/api/programs", tags=["Programs"])
    app.include_router(accounts.router, prefix="/api/accounts", tags=["Accounts"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "operational",
            "docs": "/docs"
        }

    return app


app = create_app()
