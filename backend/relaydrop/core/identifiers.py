# relaydrop/core/identifiers.py
#
# Tokens are 128 random bits and are never checked against storage for
# collisions; a repeat is only expected after ~2^64 draws.

import re
import secrets

TOKEN_BYTES = 16
SHORT_CODE_BYTES = 5
SHORT_CODE_LENGTH = 8

# RFC 4648 base32 alphabet: no 0/1/8/9, so O/I/B/G never clash with digits
SHORT_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
SHORT_CODE_RE = re.compile(r"^[A-Z2-7]{8}$")


def new_token() -> str:
    """32 lowercase hex characters from a CSPRNG."""
    return secrets.token_bytes(TOKEN_BYTES).hex()


def encode_short_code(raw: bytes) -> str:
    """Repack bytes into 5-bit groups mapped through the alphabet."""
    buffer = 0
    bits = 0
    out = []
    for byte in raw:
        buffer = (buffer << 8) | byte
        bits += 8
        while bits >= 5:
            out.append(SHORT_CODE_ALPHABET[(buffer >> (bits - 5)) & 31])
            bits -= 5
    if bits:
        out.append(SHORT_CODE_ALPHABET[(buffer << (5 - bits)) & 31])
    code = "".join(out)[:SHORT_CODE_LENGTH]
    return code.ljust(SHORT_CODE_LENGTH, SHORT_CODE_ALPHABET[0])


def new_short_code() -> str:
    """8 symbols carrying 40 random bits."""
    return encode_short_code(secrets.token_bytes(SHORT_CODE_BYTES))


def as_short_code(identifier: str) -> str | None:
    """Return the normalized short code, or None if this is not one."""
    candidate = identifier.strip().upper()
    if SHORT_CODE_RE.match(candidate):
        return candidate
    return None
