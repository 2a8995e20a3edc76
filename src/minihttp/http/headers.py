"""
=============================================================================
REQUEST HEADER CONTAINER
=============================================================================

HTTP header names are case-insensitive (RFC 9110 §5.1). These three lines
all set the same header:

    Content-Type: application/json
    content-type: application/json
    CONTENT-TYPE: application/json

Rather than calling .lower() at every lookup site, `Headers` normalizes the
name once, on every write and every read. The rest of the code can then
use whatever spelling reads best:

    headers["Content-Type"] = "text/plain"
    headers["content-type"]          # -> "text/plain"
    "CONTENT-TYPE" in headers        # -> True

=============================================================================
DUPLICATES
=============================================================================

When a client repeats a header, the LAST value wins:

    X-Mode: a\r\n
    X-Mode: b\r\n          → headers["x-mode"] == "b"

This is a plain overwrite, so it falls out of __setitem__ for free. No
comma-joining is done; nothing downstream needs multi-valued headers.

=============================================================================
"""

from collections.abc import MutableMapping
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union


class Headers(MutableMapping):
    """
    Mapping of header name → value with case-normalized (lowercase) keys.

    Iteration yields the normalized names. Insertion order is kept only
    because dict keeps it; nothing relies on it.
    """

    def __init__(
        self,
        initial: Optional[Union[Dict[str, str], Iterable[Tuple[str, str]]]] = None,
    ):
        self._items: Dict[str, str] = {}
        if initial is not None:
            self.update(initial)

    @staticmethod
    def normalize(name: str) -> str:
        """Canonical form used for storage and lookup."""
        return name.strip().lower()

    def __getitem__(self, name: str) -> str:
        return self._items[self.normalize(name)]

    def __setitem__(self, name: str, value: str) -> None:
        self._items[self.normalize(name)] = value

    def __delitem__(self, name: str) -> None:
        del self._items[self.normalize(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.normalize(name) in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._items == other._items
        if isinstance(other, dict):
            return self == Headers(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"

    def copy(self) -> "Headers":
        return Headers(self._items)
