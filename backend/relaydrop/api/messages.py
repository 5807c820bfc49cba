# relaydrop/api/messages.py

from fastapi import APIRouter, Body, Depends, Request

from relaydrop.api.deps import get_relay_service
from relaydrop.core.rate_limit import limiter, receive_limit, send_limit
from relaydrop.services.relay_service import RelayService

router = APIRouter(prefix="/api")


@router.post("/send")
@limiter.limit(send_limit)
def send_message(request: Request, payload: dict = Body(...), service: RelayService = Depends(get_relay_service)):
    expires_in = service.send(payload.get("identifier"), payload.get("message"))
    return {"ok": True, "expires_in_seconds": expires_in}


@router.post("/receive")
@limiter.limit(receive_limit)
def receive_message(request: Request, payload: dict = Body(...), service: RelayService = Depends(get_relay_service)):
    envelope = service.receive(payload.get("identifier"))
    return {"ok": True, "message": envelope.model_dump() if envelope is not None else None}
