# relaydrop/api/deps.py

from relaydrop.config import settings
from relaydrop.services.relay_service import RelayService, build_relay_service

_relay_service: RelayService | None = None


def get_relay_service() -> RelayService:
    """
    FastAPI dependency providing the shared RelayService.
    Usage:
        def my_route(service: RelayService = Depends(get_relay_service)):
            ...
    """
    global _relay_service
    if _relay_service is None:
        _relay_service = build_relay_service(settings)
    return _relay_service
