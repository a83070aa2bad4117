"""Ordered query-string parameters.

OneFS cares about the order of some query parameters and accepts bare keys
such as ``?acl`` or ``?metadata``, which a plain dict cannot express.
"""
from typing import Iterable, Iterator, List, Optional, Tuple, Union
from urllib.parse import quote_plus

StrOrBytes = Union[str, bytes]
Pair = Tuple[str, Optional[str]]


def _to_str(value: StrOrBytes) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


class OrderedValues:
    """Key/value pairs that keep insertion order and allow duplicate keys.

    Args:
        pairs: Iterable of ``(key, value)`` tuples, or one-tuples / bare keys
            for value-less parameters. Keys and values may be ``str`` or
            ``bytes``.
    """

    def __init__(self, pairs: Optional[Iterable] = None):
        self._pairs: List[Pair] = []
        for pair in pairs or ():
            if isinstance(pair, (str, bytes, bytearray)):
                self.add(pair)
            elif len(pair) == 1:
                self.add(pair[0])
            else:
                key, value = pair
                self.add(key, value)

    def add(self, key: StrOrBytes, value: Optional[StrOrBytes] = None) -> "OrderedValues":
        self._pairs.append((_to_str(key), None if value is None else _to_str(value)))
        return self

    def get(self, key: str) -> Optional[str]:
        """Return the first value stored for ``key``, or None."""
        for k, v in self._pairs:
            if k == key:
                return v
        return None

    def get_all(self, key: str) -> List[Optional[str]]:
        return [v for k, v in self._pairs if k == key]

    def set(self, key: StrOrBytes, value: Optional[StrOrBytes] = None) -> "OrderedValues":
        """Replace every value of ``key`` with ``value``.

        The replacement keeps the position of the first occurrence; the key is
        appended when it is not present yet.
        """
        key = _to_str(key)
        new = (key, None if value is None else _to_str(value))
        out: List[Pair] = []
        placed = False
        for pair in self._pairs:
            if pair[0] != key:
                out.append(pair)
            elif not placed:
                out.append(new)
                placed = True
        if not placed:
            out.append(new)
        self._pairs = out
        return self

    def delete(self, key: str) -> "OrderedValues":
        self._pairs = [p for p in self._pairs if p[0] != key]
        return self

    def copy(self) -> "OrderedValues":
        return OrderedValues(self._pairs)

    def encode(self) -> str:
        """Serialize to ``key=value&key=value``; value-less keys stay bare."""
        parts = []
        for key, value in self._pairs:
            if value is None:
                parts.append(quote_plus(key))
            else:
                parts.append(f"{quote_plus(key)}={quote_plus(value)}")
        return "&".join(parts)

    def __iter__(self) -> Iterator[Pair]:
        return iter(list(self._pairs))

    def __len__(self):
        return len(self._pairs)

    def __bool__(self):
        return bool(self._pairs)

    def __eq__(self, other):
        if isinstance(other, OrderedValues):
            return self._pairs == other._pairs
        return NotImplemented

    def __str__(self):
        return self.encode()

    def __repr__(self):
        return f"OrderedValues({self._pairs!r})"
