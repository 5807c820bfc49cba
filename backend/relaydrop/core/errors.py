# relaydrop/core/errors.py


class RelayError(Exception):
    """Base class for every failure the relay reports to a caller."""

    code = "relay_error"
    status_code = 500

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class InvalidInput(RelayError):
    """Malformed request."""

    code = "invalid_input"
    status_code = 400


class InvalidEnvelope(RelayError):
    """Message does not match a known envelope shape."""

    code = "invalid_envelope"
    status_code = 400


class PayloadTooLarge(InvalidEnvelope):
    """Plaintext message exceeds the size limit."""

    code = "payload_too_large"
    status_code = 413


class UnknownIdentifier(RelayError):
    """Short code is unknown or has expired."""

    code = "unknown_identifier"
    status_code = 404


class CorruptRecord(RelayError):
    """Stored message could not be decoded."""

    code = "corrupt_record"
    status_code = 500


class StoreUnavailable(RelayError):
    """Backing store is unreachable, retry the request."""

    code = "store_unavailable"
    status_code = 503


class AtomicTakeUnavailable(RelayError):
    """Backing store cannot fetch-and-delete in a single statement."""

    code = "atomic_take_unavailable"
    status_code = 500
