"""Heartbeat ingress - push monitors report liveness here."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..exceptions import InvalidHeartbeatStatus, InvalidHeartbeatToken, PersistenceFailure
from ..schemas.heartbeat import HeartbeatAck
from ..services.heartbeat import HeartbeatService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/push", tags=["push"])


def get_heartbeat_service(request: Request) -> HeartbeatService:
    """Dependency resolving the heartbeat service from the app context."""
    return request.app.state.context.heartbeat


@router.api_route("/{token}", methods=["GET", "POST"], response_model=HeartbeatAck)
async def receive_heartbeat(
    token: str,
    status: Optional[str] = Query(None, pattern="^(up|down)$"),
    msg: Optional[str] = Query(None, max_length=1000),
    ping: Optional[int] = Query(None, ge=0),
    heartbeat: HeartbeatService = Depends(get_heartbeat_service),
):
    """Accept a heartbeat for the push monitor owning ``token``."""
    try:
        await heartbeat.process_heartbeat(token, status=status, message=msg, ping=ping)
    except InvalidHeartbeatToken:
        logger.info("Heartbeat rejected - unknown push token")
        raise HTTPException(status_code=404, detail="Monitor not found")
    except InvalidHeartbeatStatus as e:
        raise HTTPException(status_code=422, detail=str(e))
    except PersistenceFailure as e:
        logger.error(f"Heartbeat lookup failed: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")
    return HeartbeatAck()
