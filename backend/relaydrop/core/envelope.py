# relaydrop/core/envelope.py
#
# Envelopes are a tagged union discriminated by "encrypted". The relay checks
# shape and field types only; ciphertext is never decrypted here.

import base64
import binascii
import json
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from relaydrop.core.errors import InvalidEnvelope, PayloadTooLarge

ENVELOPE_VERSION = 1
MAX_PLAINTEXT_BYTES = 50 * 1024


class PlainEnvelope(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    version: Literal[1]
    encrypted: Literal[False]
    text: str


class EncryptedEnvelope(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    version: Literal[1]
    encrypted: Literal[True]
    kdf: Literal["PBKDF2"]
    hash: Literal["SHA-256"]
    iterations: int = Field(gt=0)
    salt_b64: str
    iv_b64: str
    ciphertext_b64: str

    @field_validator("salt_b64", "iv_b64", "ciphertext_b64")
    @classmethod
    def _must_be_base64(cls, value: str) -> str:
        try:
            decoded = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("must be standard base64")
        if not decoded:
            raise ValueError("must not be empty")
        return value


Envelope = Union[PlainEnvelope, EncryptedEnvelope]


def plaintext_size(text: str) -> int:
    """Size of the text as UTF-8, which is what the cap is measured in."""
    return len(text.encode("utf-8"))


def validate_envelope(raw: Any, max_plaintext_bytes: int | None = MAX_PLAINTEXT_BYTES) -> Envelope:
    """
    Turn untyped input into a PlainEnvelope or EncryptedEnvelope.

    Raises InvalidEnvelope for any other shape and PayloadTooLarge when a
    plaintext envelope is over max_plaintext_bytes. Pass None to skip the
    size check (used when decoding records that were already accepted).
    """
    if not isinstance(raw, dict):
        raise InvalidEnvelope("message must be an object")

    version = raw.get("version")
    # bool is an int subclass, and True == 1
    if type(version) is not int or version != ENVELOPE_VERSION:
        raise InvalidEnvelope(f"unsupported envelope version: {version!r}")

    encrypted = raw.get("encrypted")
    if encrypted is False:
        model = PlainEnvelope
    elif encrypted is True:
        model = EncryptedEnvelope
    else:
        raise InvalidEnvelope("'encrypted' must be true or false")

    try:
        envelope = model.model_validate(raw)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "message" for err in e.errors())
        raise InvalidEnvelope(f"invalid {'encrypted' if encrypted else 'plain'} envelope: {fields}")

    if isinstance(envelope, PlainEnvelope):
        try:
            size = plaintext_size(envelope.text)
        except UnicodeEncodeError:
            # lone surrogates survive JSON decoding but have no UTF-8 form
            raise InvalidEnvelope("text is not valid UTF-8")
        if max_plaintext_bytes is not None and size > max_plaintext_bytes:
            raise PayloadTooLarge(f"plaintext exceeds {max_plaintext_bytes} bytes")

    return envelope


def dump_envelope(envelope: Envelope) -> str:
    return envelope.model_dump_json()


def load_envelope(raw: str) -> Envelope:
    """Decode a stored record. Raises InvalidEnvelope on anything unreadable."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        raise InvalidEnvelope("stored record is not valid JSON")
    return validate_envelope(data, max_plaintext_bytes=None)
