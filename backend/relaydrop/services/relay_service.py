# relaydrop/services/relay_service.py

import logging

from relaydrop.config import Settings
from relaydrop.core.envelope import Envelope, validate_envelope
from relaydrop.core.errors import CorruptRecord, StoreUnavailable, UnknownIdentifier
from relaydrop.infra.kv_store import KeyValueStore
from relaydrop.services.relay_store import RelayStore
from relaydrop.services.session_registry import RelaySession, ResolvedIdentifier, SessionRegistry
from relaydrop.utils.logger import redact

logger = logging.getLogger(__name__)


def share_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/send?t={token}"


class RelayService:
    """
    Session creation, send and receive. Holds no per-request state; every
    call is one or two round trips to the key-value store.
    """

    def __init__(self, registry: SessionRegistry, store: RelayStore, message_ttl_seconds: int = 1800,
                 max_plaintext_bytes: int = 50 * 1024):
        self.registry = registry
        self.store = store
        self.message_ttl_seconds = message_ttl_seconds
        self.max_plaintext_bytes = max_plaintext_bytes

    def create_session(self, base_url: str = "") -> dict:
        session: RelaySession = self.registry.create_session()
        return {
            "token": session.token,
            "short_code": session.short_code,
            "expires_in_seconds": session.expires_in_seconds,
            "share_url": share_url(base_url, session.token),
        }

    def send(self, identifier, raw_message) -> int:
        """Store the message for the identifier's token; returns the TTL used."""
        resolved = self.registry.resolve(identifier)
        envelope = validate_envelope(raw_message, max_plaintext_bytes=self.max_plaintext_bytes)
        self.store.put(resolved.token, envelope, self.message_ttl_seconds)
        logger.info(
            "Message stored for %s (%s)",
            redact(resolved.short_code or resolved.token),
            "encrypted" if envelope.encrypted else "plain",
        )
        return self.message_ttl_seconds

    def receive(self, identifier) -> Envelope | None:
        """
        Take the pending message, if any. An unknown short code reads as
        "no message yet" so pollers learn nothing about which codes exist.
        """
        try:
            resolved = self.registry.resolve(identifier)
        except UnknownIdentifier:
            return None

        try:
            envelope = self.store.take_once(resolved.token)
        except CorruptRecord:
            self._consume_alias(resolved)
            raise

        if envelope is not None:
            self._consume_alias(resolved)
            logger.info("Message delivered for %s", redact(resolved.short_code or resolved.token))
        return envelope

    def _consume_alias(self, resolved: ResolvedIdentifier):
        # short codes are single-use once their message has been taken; the
        # take is already committed, so a failed DEL leaves the alias to its TTL
        if not resolved.short_code:
            return
        try:
            self.registry.invalidate(resolved.short_code)
        except StoreUnavailable:
            logger.warning("Could not invalidate code %s after delivery", redact(resolved.short_code))


def build_relay_service(settings: Settings, kv: KeyValueStore | None = None) -> RelayService:
    if kv is None:
        kv = KeyValueStore.from_url(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return RelayService(
        registry=SessionRegistry(kv, session_ttl_seconds=settings.session_ttl_seconds),
        store=RelayStore(kv, allow_non_atomic_take=settings.allow_non_atomic_take),
        message_ttl_seconds=settings.message_ttl_seconds,
        max_plaintext_bytes=settings.max_plaintext_bytes,
    )
