# relaydrop/services/session_registry.py

import logging
from dataclasses import dataclass

from relaydrop.core.errors import InvalidInput, UnknownIdentifier
from relaydrop.core.identifiers import as_short_code, new_short_code, new_token
from relaydrop.utils.logger import redact

logger = logging.getLogger(__name__)

CODE_KEY_PREFIX = "code:"
MAX_IDENTIFIER_LENGTH = 128


def code_key(short_code: str) -> str:
    return f"{CODE_KEY_PREFIX}{short_code}"


@dataclass(frozen=True)
class RelaySession:
    token: str
    short_code: str
    expires_in_seconds: int


@dataclass(frozen=True)
class ResolvedIdentifier:
    token: str
    short_code: str | None = None


class SessionRegistry:
    """Short code -> token aliases, kept in their own key namespace."""

    def __init__(self, kv, session_ttl_seconds: int = 1800):
        self.kv = kv
        self.session_ttl_seconds = session_ttl_seconds

    def create_session(self) -> RelaySession:
        token = new_token()
        short_code = new_short_code()
        self.kv.set(code_key(short_code), token, self.session_ttl_seconds)
        logger.info("Session created: code %s", redact(short_code))
        return RelaySession(token=token, short_code=short_code, expires_in_seconds=self.session_ttl_seconds)

    def resolve(self, identifier) -> ResolvedIdentifier:
        """
        Map a short code (any case, surrounding whitespace ignored) to its
        token. Anything else is taken as a raw token as-is, without checking
        that it was ever issued.
        """
        if not isinstance(identifier, str):
            raise InvalidInput("identifier must be a string")
        trimmed = identifier.strip()
        if not trimmed or len(trimmed) > MAX_IDENTIFIER_LENGTH:
            raise InvalidInput(f"identifier must be 1-{MAX_IDENTIFIER_LENGTH} characters")

        short_code = as_short_code(trimmed)
        if short_code is None:
            return ResolvedIdentifier(token=trimmed)

        token = self.kv.get(code_key(short_code))
        if token is None:
            raise UnknownIdentifier()
        return ResolvedIdentifier(token=token, short_code=short_code)

    def invalidate(self, short_code: str) -> bool:
        return self.kv.delete(code_key(short_code))
