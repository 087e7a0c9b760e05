"""
Health Check Routes

Endpoints for service health monitoring.
"""
from fastapi import APIRouter

from ..services.engine_service import get_engine_service
from ..utils import now

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "ok",
        "service": "webhook-pusher",
        "timestamp": now()
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness check - indicates if service is ready to handle requests.
    Used by Kubernetes/orchestrators for readiness probes.
    """
    engine = get_engine_service()
    return {
        "ready": engine.is_initialized,
        "channelTypes": engine.registry.supported_types(),
        "timestamp": now()
    }


@router.get("/live")
async def liveness_check():
    """
    Liveness check - indicates if service is running.
    Used by Kubernetes/orchestrators for liveness probes.
    """
    return {
        "alive": True,
        "timestamp": now()
    }
