"""
Core data structures for Courier responses.

Provides:
- HeaderSet: Case-insensitive, case-preserving response header mapping
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, MutableMapping, Optional, Tuple, Union

HeaderValue = Union[str, int]


# ============================================================================
# HeaderSet
# ============================================================================

class HeaderSet(MutableMapping[str, HeaderValue]):
    """
    Response headers with case-insensitive names.

    The casing used by the first writer of a name is kept for output;
    later writes under any casing replace the value.
    """

    def __init__(self, items: Optional[Mapping[str, HeaderValue]] = None):
        self._data: Dict[str, Tuple[str, HeaderValue]] = {}
        if items:
            self.update(items)

    def __getitem__(self, name: str) -> HeaderValue:
        return self._data[name.lower()][1]

    def __setitem__(self, name: str, value: HeaderValue) -> None:
        key = name.lower()
        existing = self._data.get(key)
        self._data[key] = (existing[0] if existing else name, value)

    def __delitem__(self, name: str) -> None:
        del self._data[name.lower()]

    def __iter__(self) -> Iterator[str]:
        """Iterate over header names in their original casing."""
        for original, _ in self._data.values():
            yield original

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._data

    def __repr__(self) -> str:
        return f"HeaderSet({dict(self.items())})"

    def merged(self, overrides: Optional[Mapping[str, HeaderValue]]) -> "HeaderSet":
        """Return a copy with ``overrides`` applied on top (overrides win)."""
        result = HeaderSet(self)
        if overrides:
            result.update(overrides)
        return result
