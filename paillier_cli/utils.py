import re
import binascii
from base64 import urlsafe_b64encode, urlsafe_b64decode
from .errors import FormatError

_B64URL = re.compile(r"[A-Za-z0-9_-]*")

def int_to_bytes_be(n: int) -> bytes:
    return n.to_bytes((n.bit_length() + 7) // 8, "big")

def bytes_be_to_int(b: bytes) -> int:
    return int.from_bytes(b, "big")

# -----------------------------
# Base64url Integers
# -----------------------------
def int_to_b64url(n: int) -> str:
    """Unsigned big-endian magnitude, base64url without padding. Zero encodes as ''."""
    if n < 0:
        raise ValueError("Only non-negative integers can be encoded")
    return urlsafe_b64encode(int_to_bytes_be(n)).rstrip(b"=").decode("ascii")

def b64url_to_int(s: str) -> int:
    if not isinstance(s, str):
        raise FormatError(f"Expected a base64url string, got {type(s).__name__}")
    body = s.rstrip("=")
    if not _B64URL.fullmatch(body):
        raise FormatError(f"Invalid base64url characters in {s!r}")
    try:
        raw = urlsafe_b64decode(body + "=" * (-len(body) % 4))
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid base64url payload {s!r}: {e}") from e
    return bytes_be_to_int(raw)
