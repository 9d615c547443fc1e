"""
STYLEBOX - Blob Codec

Hex text encoding for opaque parameter blobs embedded in style files.
Each byte becomes two lowercase hex digits, so the text is always
exactly twice the length of the data and safe inside XML text nodes.
"""

HEX_DIGITS = '0123456789abcdef'

# Reverse lookup, upper-case digits accepted on input
_NIBBLES = {c: i for i, c in enumerate(HEX_DIGITS)}
_NIBBLES.update({c.upper(): i for i, c in enumerate(HEX_DIGITS)})


def encode(data: bytes) -> str:
    """Encode a binary buffer as hex text (2 characters per byte)."""
    if not data:
        return ''
    out = []
    for byte in bytes(data):
        out.append(HEX_DIGITS[byte >> 4])
        out.append(HEX_DIGITS[byte & 0x0F])
    return ''.join(out)


def decode(text: str) -> bytes:
    """Decode hex text back into bytes.

    Produces len(text) // 2 bytes; a trailing odd character is dropped.
    Characters outside the hex alphabet decode as a zero nibble rather
    than failing the whole buffer. Use is_valid() to detect that case.
    """
    if not text:
        return b''
    length = len(text) // 2
    out = bytearray(length)
    for i in range(length):
        hi = _NIBBLES.get(text[2 * i], 0)
        lo = _NIBBLES.get(text[2 * i + 1], 0)
        out[i] = (hi << 4) | lo
    return bytes(out)


def is_valid(text: str) -> bool:
    """Check that text is an even-length string of hex digits."""
    if text is None or len(text) % 2:
        return False
    return all(c in _NIBBLES for c in text)
