"""Health Probes — liveness and readiness for the ledger process.

Invariants:
    - GET /health/ answers 200 while the event loop is serving requests
    - GET /health/ready answers 503 until the database accepts a round-trip
    - Neither probe takes a campaign lock or opens a ledger transaction

Design Decisions:
    - db_manager resolved per request: the lifespan (or a test) installs it after import
    - Readiness reports how many campaign locks are held, a cheap signal of
      contention on hot campaigns
"""

import logging
import time

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import crowdledger.infrastructure.database as database
from crowdledger.api.dependencies import campaign_locks

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "crowdledger-api"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness():
    """Database round-trip plus lock registry size."""
    manager = database.db_manager
    started = time.perf_counter()
    reachable = manager is not None and await manager.health_check()
    if not reachable:
        logger.warning("Readiness probe failed: database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {
            "database": "healthy",
            "database_latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "campaign_locks_held": len(campaign_locks),
        },
    }
