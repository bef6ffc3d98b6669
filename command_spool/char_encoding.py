"""
UTF-8 sanitisation for serialized envelopes.

Policy:
- bytes: decoded as UTF-8, each invalid sequence becomes U+FFFD
- str: lone surrogates (what a str holds when it was decoded with
  surrogateescape, or built from broken escapes) become U+FFFD

Valid text passes through unchanged.
"""

from typing import Union

REPLACEMENT_CHARACTER = "\ufffd"


def utf8_string(value: Union[str, bytes]) -> str:
    """Return `value` as a str that encodes cleanly to UTF-8."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")

    try:
        value.encode("utf-8")
        return value
    except UnicodeEncodeError:
        # surrogatepass emits the invalid byte sequences, replace then scrubs them
        raw = value.encode("utf-8", errors="surrogatepass")
        return raw.decode("utf-8", errors="replace")
