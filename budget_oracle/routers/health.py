"""
Health Check Router
Liveness and storage backend status
"""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from budget_oracle.core.config import settings
from budget_oracle.db.storage import KeyValueStore
from budget_oracle.routers.dependencies import get_storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/status")
def storage_status(store: KeyValueStore = Depends(get_storage)):
    """
    Check that the configured insight-memory backend is reachable.
    """
    status = {
        "timestamp": datetime.utcnow().isoformat(),
        "storage": {
            "backend": settings.STORAGE_BACKEND,
            "memory_key": settings.MEMORY_KEY,
            "reachable": False,
            "error": None,
        },
    }
    try:
        status["storage"]["reachable"] = store.ping()
    except Exception as e:
        logger.error(f"Storage status check failed: {str(e)}")
        status["storage"]["error"] = str(e)

    status["status"] = "healthy" if status["storage"]["reachable"] else "degraded"
    return status
