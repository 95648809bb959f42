"""SHA-256 and HMAC-SHA256 primitives used by the signing pipeline."""

import hashlib
import hmac
from typing import BinaryIO, Union

from .exceptions import CryptoFailureError, InvalidInputError

EMPTY_SHA256_HASH = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'

# Chunk size used when hashing file-like payloads.
PAYLOAD_BUFFER = 1024 * 1024

BytesLike = Union[bytes, bytearray, memoryview]


def _to_bytes(value: Union[str, BytesLike], what: str) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise InvalidInputError(f"{what} must be str or bytes, got {type(value).__name__}")


def _new_sha256():
    try:
        return hashlib.sha256()
    except ValueError as e:
        raise CryptoFailureError(f"SHA-256 is unavailable: {e}") from e


def sha256_hex(payload: Union[str, BytesLike]) -> str:
    hasher = _new_sha256()
    hasher.update(_to_bytes(payload, 'payload'))
    return hasher.hexdigest()


def sha256_hex_stream(stream: BinaryIO) -> str:
    """Hash a seekable binary stream without consuming it.

    The stream position is restored once the digest is computed.
    """
    hasher = _new_sha256()
    position = stream.tell()
    try:
        for chunk in iter(lambda: stream.read(PAYLOAD_BUFFER), b''):
            hasher.update(_to_bytes(chunk, 'stream chunk'))
    finally:
        stream.seek(position)
    return hasher.hexdigest()


def hmac_sha256(key: Union[str, BytesLike], message: Union[str, BytesLike]) -> bytes:
    """Return the raw 32-byte HMAC-SHA256 of ``message`` under ``key``.

    A new ``bytes`` object is returned on every call.
    """
    key = _to_bytes(key, 'key')
    message = _to_bytes(message, 'message')
    try:
        return hmac.new(key, message, hashlib.sha256).digest()
    except ValueError as e:
        raise CryptoFailureError(f"HMAC-SHA256 failed: {e}") from e
