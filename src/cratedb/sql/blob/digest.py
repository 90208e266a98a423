import binascii
import hashlib
import io
from typing import BinaryIO

# 100 KiB per read while hashing
DIGEST_CHUNK_SIZE = 1024 * 100


def sha1_digest(stream: BinaryIO, chunk_size: int = DIGEST_CHUNK_SIZE) -> bytes:
    """
    Compute the SHA-1 digest of a seekable byte stream.

    The stream is hashed from its start to its end and left rewound to offset 0,
    so the same object can be handed to the upload afterwards.

    Raises:
        OSError: if reading or seeking the stream fails
        ValueError: if the stream is closed
    """
    sha1 = hashlib.sha1()
    stream.seek(0, io.SEEK_SET)
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        sha1.update(chunk)
    stream.seek(0, io.SEEK_SET)
    return sha1.digest()


def to_hex_string(digest: bytes) -> str:
    """
    Creates a lowercase hex string from an array of bytes.

    Examples:
        to_hex_string(b"11111") -> "3131313131"
        to_hex_string(bytes([255])) -> "ff"
    """
    return digest.hex()


def from_hex_string(text: str) -> bytes:
    """Strict inverse of to_hex_string. Raises ValueError on malformed input."""
    try:
        return binascii.unhexlify(text)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid hex digest: {text!r}") from e
