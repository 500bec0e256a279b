"""PEM framing for SEC1 private keys stored under a PRIVATE KEY label.

cryptography only writes SEC1 keys as EC PRIVATE KEY PEM, so the DER is
framed here; every other key goes through cryptography's own PEM support.
"""

import base64
import re
from typing import Tuple

from python_keysign.crypto.errors import KeyDecodeError

LINE_LENGTH = 64

_BLOCK_RE = re.compile(
    rb"-----BEGIN (?P<type>[A-Z0-9 ]+)-----\r?\n"
    rb"(?P<body>.*?)"
    rb"-----END (?P=type)-----",
    re.DOTALL,
)


def encode_block(block_type: str, der: bytes) -> bytes:
    """Wrap DER bytes in a PEM block with 64 column base64 lines."""
    body = base64.b64encode(der)
    lines = [body[i:i + LINE_LENGTH] for i in range(0, len(body), LINE_LENGTH)]

    out = b"-----BEGIN " + block_type.encode("ascii") + b"-----\n"
    for line in lines:
        out += line + b"\n"
    out += b"-----END " + block_type.encode("ascii") + b"-----\n"
    return out


def decode_block(data: bytes) -> Tuple[str, bytes]:
    """Return (type, der) for the first PEM block found in data."""
    match = _BLOCK_RE.search(data)
    if match is None:
        raise KeyDecodeError("no PEM block found")

    body = b"".join(match.group("body").split())
    try:
        der = base64.b64decode(body, validate=True)
    except ValueError as e:
        raise KeyDecodeError(f"invalid PEM body: {e}") from e

    return match.group("type").decode("ascii"), der
