import logging
import re
from typing import Any, Optional, TypeAlias

from queryparam.errors import InvalidValueError
from queryparam.escape import (
    DEFAULT_ENCODING,
    form_escape,
    form_unescape,
    has_malformed_escape,
)
from queryparam.util.multi_value_dict import MultiValueDict

__all__ = ("QueryParams", "DEFAULT_ENCODING", "DEFAULT_ERRORS")

DEFAULT_ERRORS = "replace"

RE_PARAM = re.compile(r"([^&=]+)=?([^&]*)")

Value: TypeAlias = str | list[str]

logger = logging.getLogger(__name__)


def _as_list(value: Value) -> list[str]:
    return value if isinstance(value, list) else [value]


def _to_str(key: str, value: Any) -> str:
    if value is None:
        raise InvalidValueError(key)
    return value if isinstance(value, str) else str(value)


class QueryParams:
    """Parameters of an ``application/x-www-form-urlencoded`` query string.

    Values are kept exactly as they appear in the query string and are only
    decoded when first read. Keys that are never read or set are written back
    by :meth:`to_string` unchanged, so ``QueryParams(s).to_string() == s``.

    A key with a single value is returned as a ``str``, a key with more than
    one value as a ``list`` of ``str``.

    Instances hold no shared state, but are not safe to mutate from several
    threads at once; callers must serialize access to a shared instance.
    """

    __slots__ = ("_raw", "_decoded", "_order", "encoding", "errors")

    def __init__(
        self,
        query_string: str | bytes = None,
        *,
        encoding: str = DEFAULT_ENCODING,
        errors: str = DEFAULT_ERRORS,
    ):
        self.encoding = encoding
        self.errors = errors

        if isinstance(query_string, bytes):
            query_string = query_string.decode(encoding, "surrogateescape")

        self._raw: MultiValueDict[str] = MultiValueDict(
            RE_PARAM.findall(query_string or "")
        )
        self._decoded: dict[str, Value] = {}
        # key -> True when the key was read from the query string
        self._order: dict[str, bool] = dict.fromkeys(self._raw, True)

        logger.debug(
            "parsed %d value(s) for %d key(s)", self._raw.count(), len(self._raw)
        )

    def get(self, key: str, default: Value = None) -> Optional[Value]:
        if key in self._decoded:
            return self._decoded[key]

        raw_values = self._raw.get_all(key)
        if raw_values is None:
            return default

        logger.debug("decoding %d value(s) of '%s'", len(raw_values), key)

        values = [self._unescape(key, value) for value in raw_values]
        self._decoded[key] = values[0] if len(values) == 1 else values

        return self._decoded[key]

    def set(self, key: str, value: Value):
        """Replace every value of ``key``.

        ``value`` is taken as already decoded. A list assigns several values.
        """

        if isinstance(value, (list, tuple)):
            value = [_to_str(key, i) for i in value]
        else:
            value = _to_str(key, value)

        self._raw.discard(key)
        self._decoded[key] = value
        self._order.setdefault(key, False)

    def has(self, key: str) -> bool:
        return key in self._raw or key in self._decoded

    def keys(self) -> list[str]:
        return list(self._order)

    def values(self) -> list[Value]:
        return [self.get(key) for key in self._order]

    def items(self) -> list[tuple[str, Value]]:
        return [(key, self.get(key)) for key in self._order]

    def pairs(self) -> list[tuple[str, str]]:
        """Every ``(key, value)`` pair, one per value, in query string order."""

        return [
            (key, value)
            for key in self._order
            for value in _as_list(self.get(key))
        ]

    def to_string(self) -> str:
        pairs = []

        for key, from_query in self._order.items():
            if key in self._decoded:
                # keys are never decoded, so a key from the query is already escaped
                escaped_key = key if from_query else form_escape(key, self.encoding)
                pairs += [
                    f"{escaped_key}={form_escape(value, self.encoding)}"
                    for value in _as_list(self._decoded[key])
                ]
            else:
                pairs += [f"{key}={value}" for value in self._raw.get_all(key)]

        return "&".join(pairs)

    def encode(self) -> bytes:
        return self.to_string().encode(self.encoding, "surrogateescape")

    # CGI style accessors

    def param(self, key: str = None) -> list[str] | Value | None:
        if key is None:
            return self.keys()
        return self.get(key)

    def params(self) -> dict[str, Value]:
        return dict(self.items())

    def Vars(self) -> dict[str, str]:
        """Map every key to a single value, the last one for multi-valued keys.

        This loses values, use :meth:`params` to keep all of them.
        """

        result = {}
        for key, value in self.items():
            if values := _as_list(value):
                result[key] = values[-1]
        return result

    def _unescape(self, key: str, value: str) -> str:
        if has_malformed_escape(value):
            logger.debug("malformed percent escape in '%s' kept as is", key)
        return form_unescape(value, self.encoding, self.errors)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __getitem__(self, key: str) -> Value:
        if not self.has(key):
            raise KeyError(key)
        return self.get(key)

    def __setitem__(self, key: str, value: Value):
        self.set(key, value)

    def __iter__(self):
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._order)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string()!r})"

    def __eq__(self, o: object) -> bool:
        if isinstance(o, QueryParams):
            return self.params() == o.params()
        if isinstance(o, dict):
            return self.params() == o
        if isinstance(o, (str, bytes)):
            return self.params() == QueryParams(o, encoding=self.encoding).params()
        return False
