# relaydrop/api/sessions.py

from fastapi import APIRouter, Depends, Request

from relaydrop.api.deps import get_relay_service
from relaydrop.config import settings
from relaydrop.core.rate_limit import limiter, session_limit
from relaydrop.services.relay_service import RelayService

router = APIRouter(prefix="/api")


def resolve_base_url(request: Request) -> str:
    if settings.base_url:
        return settings.base_url.rstrip("/")
    proto = request.headers.get("x-forwarded-proto", "https")
    host = request.headers.get("x-forwarded-host") or request.headers.get("host")
    if not host:
        return ""
    return f"{proto}://{host}"


@router.post("/session")
@limiter.limit(session_limit)
def create_session(request: Request, service: RelayService = Depends(get_relay_service)):
    """Issue a token and short code for one message."""
    return service.create_session(base_url=resolve_base_url(request))
