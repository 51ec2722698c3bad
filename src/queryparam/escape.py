import re
import urllib.parse

__all__ = ("form_escape", "form_unescape", "has_malformed_escape")

DEFAULT_ENCODING = "utf-8"

RE_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

# bytes that did not decode, as left by the "surrogateescape" error handler
RE_ESCAPED_BYTE = re.compile("[\udc80-\udcff]")


def form_unescape(
    value: str, encoding: str = DEFAULT_ENCODING, errors: str = "replace"
) -> str:
    """Decode a form-urlencoded value.

    ``+`` becomes a space and every ``%XX`` escape becomes the byte ``XX``.
    The resulting bytes are decoded with ``encoding`` and ``errors``.
    A ``%`` that does not start a valid escape is kept as it is, so
    ``"100%"`` decodes to ``"100%"``.

    Undecodable bytes carried in ``value`` through ``surrogateescape`` are
    decoded together with the escaped bytes, so ``errors`` applies to both.
    """

    if RE_ESCAPED_BYTE.search(value) is None:
        return urllib.parse.unquote_plus(value, encoding=encoding, errors=errors)

    raw = value.replace("+", " ").encode(encoding, "surrogateescape")
    return urllib.parse.unquote_to_bytes(raw).decode(encoding, errors)


def form_escape(value: str, encoding: str = DEFAULT_ENCODING) -> str:
    """Encode a value for a form-urlencoded query string.

    ASCII letters, digits and ``_.-~`` are kept, spaces become ``+`` and
    everything else is written as uppercase ``%XX`` escapes of its
    ``encoding`` bytes.
    """

    return urllib.parse.quote_plus(
        value, safe="", encoding=encoding, errors="surrogateescape"
    )


def has_malformed_escape(value: str) -> bool:
    return RE_MALFORMED_ESCAPE.search(value) is not None
