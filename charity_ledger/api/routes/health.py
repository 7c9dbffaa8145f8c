"""Health Checks — liveness plus readiness of every collaborator a donation needs.

Invariants:
    - GET /health/ answers 200 whenever the process is up
    - GET /health/ready answers 200 only when the database responds AND the
      payment rail and proof verifier singletons exist; otherwise 503 naming
      each failing check
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import charity_ledger.api.dependencies as deps_module
import charity_ledger.infrastructure.database as db_module
import charity_ledger.infrastructure.payment_rail as rail_module

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "charity-ledger-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness — singletons read at request time, never at import."""
    manager = db_module.db_manager
    checks = {
        "database": bool(manager) and await manager.health_check(),
        "payment_rail": rail_module.payment_rail is not None,
        "proof_verifier": deps_module.proof_verifier is not None,
    }
    report = {name: "healthy" if ok else "unavailable" for name, ok in checks.items()}
    if not all(checks.values()):
        logger.warning(f"Readiness failed: {report}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": report},
        )
    return {"status": "ready", "checks": report}
