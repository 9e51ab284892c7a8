"""
Password-based payload encryption.

Codecs only rely on the :class:`Cipher` contract. :class:`PassphraseCipher`
is the bundled implementation: PBKDF2-HMAC-SHA256 key derivation and
ChaCha20-Poly1305, serialised as a printable ``sc1:<base64>`` string holding
``salt | nonce | ciphertext+tag``.
"""

import base64
import binascii
import logging
import os
from typing import Optional, Protocol, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .config import CIPHER_PREFIX, KDF_ITERATIONS, NONCE_LEN, SALT_LEN
from .errors import CollaboratorFailure, WrongPasswordOrCorrupt
from .result import Message, NotFound

logger = logging.getLogger(__name__)

_TAG_LEN = 16


class Cipher(Protocol):
    def encrypt(self, plaintext: bytes, password: str) -> str:
        ...

    def decrypt(self, ciphertext: str, password: str) -> bytes:
        ...


class PassphraseCipher:
    """ChaCha20-Poly1305 keyed from a passphrase.

    Args:
        iterations: PBKDF2 rounds; encrypt and decrypt must agree
    """

    def __init__(self, iterations: int = KDF_ITERATIONS):
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        self.iterations = iterations

    def derive_key(self, password: str, salt: bytes, length: int = 32) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=length,
            salt=salt,
            iterations=self.iterations,
        )
        return kdf.derive(password.encode("utf-8"))

    def encrypt(self, plaintext: bytes, password: str) -> str:
        salt = os.urandom(SALT_LEN)
        nonce = os.urandom(NONCE_LEN)
        try:
            ct = ChaCha20Poly1305(self.derive_key(password, salt)).encrypt(nonce, plaintext, None)
        except (ValueError, OverflowError) as exc:
            raise CollaboratorFailure(f"Encryption failed: {exc}") from exc
        return CIPHER_PREFIX + base64.b64encode(salt + nonce + ct).decode("ascii")

    def decrypt(self, ciphertext: str, password: str) -> bytes:
        if not ciphertext.startswith(CIPHER_PREFIX):
            raise WrongPasswordOrCorrupt("Ciphertext is not in sc1 format")
        try:
            blob = base64.b64decode(ciphertext[len(CIPHER_PREFIX):], validate=True)
        except (binascii.Error, ValueError) as exc:
            raise WrongPasswordOrCorrupt("Ciphertext is not valid base64") from exc
        if len(blob) < SALT_LEN + NONCE_LEN + _TAG_LEN:
            raise WrongPasswordOrCorrupt("Ciphertext is truncated")
        salt = blob[:SALT_LEN]
        nonce = blob[SALT_LEN:SALT_LEN + NONCE_LEN]
        try:
            return ChaCha20Poly1305(self.derive_key(password, salt)).decrypt(
                nonce, blob[SALT_LEN + NONCE_LEN:], None
            )
        except InvalidTag as exc:
            raise WrongPasswordOrCorrupt("Wrong password or corrupted ciphertext") from exc


# ======================================================
# ---- Codec-side helpers ----
# ======================================================
def encrypt_if_needed(payload: bytes, password: Optional[str], cipher: Optional[Cipher] = None) -> bytes:
    if not password:
        return payload
    cipher = cipher or PassphraseCipher()
    return cipher.encrypt(payload, password).encode("ascii")


def decrypt_if_needed(data: bytes, password: Optional[str], cipher: Optional[Cipher] = None) -> bytes:
    if not password:
        return data
    try:
        text = data.decode("ascii")
    except UnicodeDecodeError as exc:
        raise WrongPasswordOrCorrupt("Embedded payload is not a ciphertext string") from exc
    cipher = cipher or PassphraseCipher()
    return cipher.decrypt(text, password)


def reveal_payload(
    data: Optional[bytes], password: Optional[str], cipher: Optional[Cipher] = None
) -> Union[Message, NotFound]:
    """Turn extracted frame bytes into a decode result."""
    if data is None:
        return NotFound("no frame found in carrier")
    try:
        return Message(decrypt_if_needed(data, password, cipher))
    except WrongPasswordOrCorrupt as exc:
        logger.debug(f"Decryption failed: {exc}")
        return NotFound("wrong password or corrupted payload")
