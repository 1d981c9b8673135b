"""
emissions/factors.py

Emission factor lookup by fuel type.

Responsibilities
----------------
- Hold an immutable copy of a fuel type → CO2-equivalent factor mapping.
- Apply fuel type aliases (``NG`` → ``GAS``) before every lookup.
- Raise `UnrecognizedFuelTypeError` for fuel types with no factor.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .constants import CO2_EMISSIONS_FACTORS, FUEL_TYPE_ALIASES
from .errors import UnrecognizedFuelTypeError


def normalize_fuel_type(fuel_type: str) -> str:
    """Return the factor-table key for an upstream fuel type code."""
    return FUEL_TYPE_ALIASES.get(fuel_type, fuel_type)


class EmissionFactorTable(Mapping):
    """Read-only mapping of fuel type code to a nonnegative emission factor."""

    def __init__(self, factors: Mapping[str, float] = CO2_EMISSIONS_FACTORS):
        table = {}
        for fuel_type, factor in factors.items():
            factor = float(factor)
            if not factor >= 0:
                raise ValueError(f"Emission factor for {fuel_type} must be nonnegative, got {factor}")
            table[fuel_type] = factor
        self._factors = MappingProxyType(table)

    def factor_for(self, fuel_type: str) -> float:
        """Look up the factor for ``fuel_type`` after alias normalisation.

        Raises:
            UnrecognizedFuelTypeError: Carrying the original ``fuel_type``
                when the normalised code has no entry.
        """
        try:
            return self._factors[normalize_fuel_type(fuel_type)]
        except KeyError:
            raise UnrecognizedFuelTypeError(fuel_type) from None

    def __getitem__(self, fuel_type: str) -> float:
        return self._factors[fuel_type]

    def __iter__(self):
        return iter(self._factors)

    def __len__(self) -> int:
        return len(self._factors)

    def __repr__(self) -> str:
        return f"EmissionFactorTable({dict(self._factors)!r})"
