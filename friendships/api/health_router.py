import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from friendships.core.errors import StorageUnavailable
from friendships.db.session import get_db

log = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        log.error("Health check failed: %s", e)
        raise StorageUnavailable("Database unreachable") from e
    return {"status": "ok"}
