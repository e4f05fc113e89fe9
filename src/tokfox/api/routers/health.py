from fastapi import APIRouter, Depends
from tokfox.api import deps
from tokfox.db.session import Database
from tokfox.services.health import check_db

router = APIRouter(prefix="/health", tags=["health"])

@router.get("/liveness")
async def liveness():
    """Verify whether the API is ready to receive traffic."""
    return {"status": "ok"}

@router.get("/readiness")
async def readiness(database: Database = Depends(deps.get_database)):
    """Verify whether the API is ready to process traffic."""
    if await check_db(database):
        return {"status": "ready"}
    return {"status": "degraded"}
