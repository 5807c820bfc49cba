# relaydrop/clients/envelope_crypto.py
#
# Client-side sealing for PIN-protected messages. The relay itself never
# imports this module and never sees the PIN.

import base64
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

DEFAULT_ITERATIONS = 200_000
SALT_LEN = 16
IV_LEN = 12
KEY_LEN = 32  # AES-256


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode()


def b64d(s: str) -> bytes:
    return base64.b64decode(s)


# ---------- KEY DERIVATION ----------

def derive_pin_key(pin: str, salt: bytes, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    """
    PBKDF2-HMAC-SHA256 → 32-byte AES-256 key
    """
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LEN,
        salt=salt,
        iterations=iterations,
    ).derive(pin.encode("utf-8"))


# ---------- ENVELOPES ----------

def plain_envelope(text: str) -> dict:
    return {"version": 1, "encrypted": False, "text": text}


def seal_text(text: str, pin: str, iterations: int = DEFAULT_ITERATIONS) -> dict:
    """
    AES-GCM under a PIN-derived key → encrypted envelope dict
    """
    salt = os.urandom(SALT_LEN)
    iv = os.urandom(IV_LEN)
    key = derive_pin_key(pin, salt, iterations)
    ciphertext = AESGCM(key).encrypt(iv, text.encode("utf-8"), None)
    return {
        "version": 1,
        "encrypted": True,
        "kdf": "PBKDF2",
        "hash": "SHA-256",
        "iterations": iterations,
        "salt_b64": b64e(salt),
        "iv_b64": b64e(iv),
        "ciphertext_b64": b64e(ciphertext),
    }


def open_envelope(envelope: dict, pin: str | None = None) -> str:
    """Return the text of a received envelope; wrong PIN raises InvalidTag."""
    if not envelope.get("encrypted"):
        return envelope["text"]
    if pin is None:
        raise ValueError("PIN required for an encrypted message")
    key = derive_pin_key(pin, b64d(envelope["salt_b64"]), envelope["iterations"])
    plaintext = AESGCM(key).decrypt(b64d(envelope["iv_b64"]), b64d(envelope["ciphertext_b64"]), None)
    return plaintext.decode("utf-8")
