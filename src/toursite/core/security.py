import os
import secrets

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from passlib.context import CryptContext

from toursite.core.config import ENCRYPTION_KEY_LENGTH, settings
from toursite.core.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

# 32 random bytes rendered as 64 hex characters
SESSION_TOKEN_BYTES = 32

_IV_LENGTH = 16


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def generate_session_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def _cipher_key(key: str | None = None) -> bytes:
    material = (key or settings.ENCRYPTION_KEY).encode("utf-8")
    return material[:ENCRYPTION_KEY_LENGTH]


def encrypt_api_key(plaintext: str, key: str | None = None) -> str:
    """Encrypt an API key with AES-256-CBC.

    Returns:
        ``"<iv hex>:<ciphertext hex>"``
    """
    iv = os.urandom(_IV_LENGTH)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(_cipher_key(key)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{ciphertext.hex()}"


def decrypt_api_key(stored: str, key: str | None = None) -> str:
    """Decrypt a value produced by :func:`encrypt_api_key`.

    Values that are not in ``iv:ciphertext`` form, or that fail to decrypt,
    are returned unchanged. Keys saved before encryption was introduced are
    stored as plain text.
    """
    iv_hex, sep, cipher_hex = stored.partition(":")
    if not sep:
        return stored

    try:
        iv = bytes.fromhex(iv_hex)
        ciphertext = bytes.fromhex(cipher_hex)
        decryptor = Cipher(algorithms.AES(_cipher_key(key)), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except ValueError as e:
        # Also covers UnicodeDecodeError and bad IV length
        logger.warning("api_key_decrypt_failed", error=str(e))
        return stored


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask all but the last few characters of a secret for display."""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
