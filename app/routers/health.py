"""Health checks."""
from fastapi import APIRouter, Request
import logging
from sqlalchemy import text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    database = "ok"
    try:
        with request.app.state.database.session() as db:
            db.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Database health check failed", exc_info=True)
        database = "unavailable"
    return {"status": "ok", "database": database}
