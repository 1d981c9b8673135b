"""
emissions/registry.py

Ordered registry of balancing authority codes.

The registry fixes the index of every BA in the generation, emissions and
carbon intensity vectors and in both axes of the interchange matrix. All
pieces of a single computation must share one registry.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .constants import DEFAULT_BALANCING_AUTHORITIES


class BalancingAuthorityRegistry:
    """Immutable, ordered set of BA codes with a precomputed index lookup."""

    __slots__ = ("_codes", "_index")

    def __init__(self, codes: Iterable[str] = DEFAULT_BALANCING_AUTHORITIES):
        codes = tuple(codes)
        if not codes:
            raise ValueError("A balancing authority registry needs at least one code")
        index = {}
        for i, code in enumerate(codes):
            if code in index:
                raise ValueError(f"Duplicate balancing authority code: {code}")
            index[code] = i
        self._codes = codes
        self._index = index

    @property
    def codes(self) -> tuple[str, ...]:
        return self._codes

    def index_of(self, code: str) -> int | None:
        """Return the position of ``code``, or None if it is not registered."""
        return self._index.get(code)

    def __len__(self) -> int:
        return len(self._codes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._codes)

    def __contains__(self, code) -> bool:
        return code in self._index

    def __eq__(self, other) -> bool:
        if not isinstance(other, BalancingAuthorityRegistry):
            return NotImplemented
        return self._codes == other._codes

    def __hash__(self) -> int:
        return hash(self._codes)

    def __repr__(self) -> str:
        return f"BalancingAuthorityRegistry({list(self._codes)!r})"
