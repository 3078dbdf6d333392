"""Render raw filesystem bytes for human-readable messages."""

from __future__ import annotations

import os
from typing import Union

_SIMPLE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}

# Characters that never require a path to be quoted.
_SAFE_PUNCTUATION = set("/._-+,:@%=~")


def escape_bytes(raw: Union[bytes, str]) -> str:
    """Escape a raw name, e.g. ``b"bad\\xffdir"`` becomes ``bad\\xFFdir``.

    Valid UTF-8 is kept as text; every undecodable byte is written as an
    uppercase ``\\xNN`` escape.
    """

    text = os.fsencode(raw).decode("utf-8", errors="surrogateescape")
    out = []
    for char in text:
        code = ord(char)
        if 0xDC80 <= code <= 0xDCFF:
            out.append(f"\\x{code - 0xDC00:02X}")
        elif char in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[char])
        elif not char.isprintable():
            out.append(f"\\u{{{code:x}}}")
        else:
            out.append(char)
    return "".join(out)


def quote_bytes(raw: Union[bytes, str]) -> str:
    """Return ``raw`` escaped and wrapped in double quotes."""

    return f'"{escape_bytes(raw)}"'


def display_path(raw: Union[bytes, str]) -> str:
    """Show a path verbatim when it is plain, quoted otherwise."""

    encoded = os.fsencode(raw)
    try:
        text = encoded.decode("utf-8")
    except UnicodeDecodeError:
        return quote_bytes(encoded)
    if text and all(char.isalnum() or char in _SAFE_PUNCTUATION for char in text):
        return text
    return quote_bytes(encoded)
