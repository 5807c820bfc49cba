# relaydrop/core/rate_limit.py
#
# Per-client-address limits. Short codes carry only 40 bits, so session
# creation and receive are the endpoints worth slowing down.

from slowapi import Limiter
from slowapi.util import get_remote_address

from relaydrop.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def session_limit() -> str:
    return settings.session_rate_limit


def send_limit() -> str:
    return settings.send_rate_limit


def receive_limit() -> str:
    return settings.receive_rate_limit
