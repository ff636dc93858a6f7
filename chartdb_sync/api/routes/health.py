"""Health Probes — what RemoteSyncClient.health_check and deployments poll.

Invariants:
    - GET /health answers 200 whenever the process is serving (liveness)
    - GET /health/ready answers 503 until the catalog database answers a query

Design Decisions:
    - Mounted at /health, not under /api/sync: the client probes
      {endpoint}/health and only looks at the status code
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

import chartdb_sync.infrastructure.database as db_module

router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "chartdb-sync"


@router.get("")
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness():
    manager = db_module.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "checks": {"database": "unavailable"}},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
