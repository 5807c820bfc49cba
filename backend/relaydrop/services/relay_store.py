# relaydrop/services/relay_store.py

import logging

from relaydrop.core.envelope import Envelope, dump_envelope, load_envelope
from relaydrop.core.errors import AtomicTakeUnavailable, CorruptRecord, InvalidEnvelope
from relaydrop.utils.logger import redact

logger = logging.getLogger(__name__)

MESSAGE_KEY_PREFIX = "msg:"


def message_key(token: str) -> str:
    return f"{MESSAGE_KEY_PREFIX}{token}"


class RelayStore:
    """
    At most one pending envelope per token, delivered at most once.

    Expiry is left entirely to the key-value store; an expired record reads
    the same as an empty one.
    """

    def __init__(self, kv, allow_non_atomic_take: bool = False):
        self.kv = kv
        self.exactly_once = kv.supports_atomic_take
        if not self.exactly_once:
            if not allow_non_atomic_take:
                raise AtomicTakeUnavailable()
            logger.warning(
                "Backing store has no atomic get-and-delete; falling back to GET then DEL. "
                "Concurrent receivers may both get the same message."
            )

    def put(self, token: str, envelope: Envelope, ttl_seconds: int):
        # last write wins, no queueing
        self.kv.set(message_key(token), dump_envelope(envelope), ttl_seconds)
        logger.debug("Stored message for %s (ttl=%ss)", redact(token), ttl_seconds)

    def take_once(self, token: str) -> Envelope | None:
        """
        Remove and return the pending envelope, or None.

        The record is gone once this returns or raises; CorruptRecord means
        something was stored but cannot be decoded.
        """
        key = message_key(token)
        if self.exactly_once:
            raw = self.kv.get_and_delete(key)
        else:
            raw = self.kv.get(key)
            if raw is not None:
                self.kv.delete(key)

        if raw is None:
            return None

        try:
            return load_envelope(raw)
        except InvalidEnvelope as e:
            logger.error("Undecodable record for %s: %s", redact(token), e.detail)
            raise CorruptRecord() from e
