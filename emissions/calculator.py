"""
emissions/calculator.py

Per-hour facade over the attribution engine.

Responsibilities
----------------
- Hold the BA registry and emission factor table used for every hour
  (defaults: the built-in registry and factors, overridable via
  `CalculatorConfig`).
- Run the aggregators and the solver for one hour of records and return
  results aligned to the registry order.

Notes
-----
- The calculator keeps no state between calls. Registry and factor table are
  immutable, so one instance can serve many hours, sequentially or from
  several threads.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

from .aggregate import emissions_vector, generation_vector, interchange_matrix
from .factors import EmissionFactorTable
from .records import HourlyGenerationRecord, HourlyInterchangeRecord
from .registry import BalancingAuthorityRegistry
from .solver import solve_carbon_intensity


class CalculatorConfig(BaseModel):
    """Overrides for the calculator's registry and factor table.

    Attributes:
        balancing_authorities: Ordered BA codes; None keeps the default
            registry.
        emission_factors: Fuel type → factor mapping; None keeps the
            default table.
    """

    model_config = ConfigDict(frozen=True)

    balancing_authorities: list[str] | None = None
    emission_factors: dict[str, float] | None = None

    @field_validator("balancing_authorities")
    @classmethod
    def unique_codes(cls, v):
        """Reject an empty or duplicated BA override.

        Args:
            v: The requested registry codes, or None for the default.

        Returns:
            The codes unchanged.

        Raises:
            ValueError: If the list is empty or repeats a code.
        """
        if v is not None:
            if not v:
                raise ValueError("balancing_authorities must not be empty")
            if len(set(v)) != len(v):
                raise ValueError("balancing_authorities must be unique")
        return v

    @field_validator("emission_factors")
    @classmethod
    def nonnegative_factors(cls, v):
        """Reject negative emission factors.

        Args:
            v: The requested fuel type → factor mapping, or None.

        Returns:
            The mapping unchanged.

        Raises:
            ValueError: Naming every fuel type with a negative factor.
        """
        if v is not None:
            negative = sorted(k for k, f in v.items() if f < 0)
            if negative:
                raise ValueError(f"emission factors must be nonnegative: {negative}")
        return v


@dataclass(frozen=True)
class HourlyAttribution:
    """Engine output for a single hour, aligned to ``codes``."""

    period: str | None
    codes: tuple[str, ...]
    generation: np.ndarray
    emissions: np.ndarray
    carbon_intensity: np.ndarray

    def as_dict(self, field: str = "carbon_intensity") -> dict[str, float]:
        """Map each BA code to its value of ``field``."""
        values = getattr(self, field)
        return {code: float(v) for code, v in zip(self.codes, values)}

    @property
    def total_emissions(self) -> float:
        return float(self.emissions.sum())


class EmissionsCalculator:
    """Compute production emissions and carbon intensity for one hour at a time."""

    def __init__(
        self,
        registry: BalancingAuthorityRegistry | Sequence[str] | None = None,
        factors: EmissionFactorTable | Mapping[str, float] | None = None,
    ):
        if registry is None:
            registry = BalancingAuthorityRegistry()
        elif not isinstance(registry, BalancingAuthorityRegistry):
            registry = BalancingAuthorityRegistry(registry)

        if factors is None:
            factors = EmissionFactorTable()
        elif not isinstance(factors, EmissionFactorTable):
            factors = EmissionFactorTable(factors)

        self.registry = registry
        self.factors = factors

    @classmethod
    def from_config(cls, config: CalculatorConfig) -> EmissionsCalculator:
        """Build a calculator from validated configuration.

        Args:
            config: Registry and factor overrides; unset fields fall back to
                the built-in registry and factor table.

        Returns:
            EmissionsCalculator: A calculator bound to the resolved tables.
        """
        return cls(config.balancing_authorities, config.emission_factors)

    def get_generation_vector(self, records: Iterable[HourlyGenerationRecord]) -> np.ndarray:
        """Total generation per BA for one hour.

        Args:
            records: Generation-by-fuel records of a single hour.

        Returns:
            np.ndarray: ``G`` in registry order.

        Raises:
            ParseError: For a malformed record value.
        """
        return generation_vector(records, self.registry)

    def get_emissions_vector(self, records: Iterable[HourlyGenerationRecord]) -> np.ndarray:
        """Direct emissions per BA for one hour.

        Args:
            records: Generation-by-fuel records of a single hour.

        Returns:
            np.ndarray: ``E`` in registry order.

        Raises:
            UnrecognizedFuelTypeError: For a fuel type missing from the
                factor table.
            ParseError: For a malformed record value.
        """
        return emissions_vector(records, self.registry, self.factors)

    def get_interchange_matrix(self, records: Iterable[HourlyInterchangeRecord]) -> np.ndarray:
        """Directed BA × BA transfer matrix for one hour.

        Args:
            records: Interchange records of a single hour; the last record
                of a duplicated (from, to) pair wins.

        Returns:
            np.ndarray: ``I`` of shape (n, n) in registry order.

        Raises:
            ParseError: For a malformed record value.
        """
        return interchange_matrix(records, self.registry)

    def production_emissions(self, generation_records: Iterable[HourlyGenerationRecord]) -> float:
        """Total direct emissions of the hour across the registry.

        Args:
            generation_records: Generation-by-fuel records of a single hour.

        Returns:
            float: Sum of the emissions vector.

        Raises:
            UnrecognizedFuelTypeError: For a fuel type missing from the
                factor table.
            ParseError: For a malformed record value.
        """
        return float(self.get_emissions_vector(generation_records).sum())

    def calculate_carbon_intensity(
        self,
        generation_records: Sequence[HourlyGenerationRecord],
        interchange_records: Sequence[HourlyInterchangeRecord],
    ) -> np.ndarray:
        """Return the carbon intensity vector for one hour of records.

        Raises:
            UnrecognizedFuelTypeError: For a fuel type missing from the
                factor table.
            IllConditionedError: If the attribution system cannot be solved
                reliably.
            ParseError: For a malformed record value.
        """
        return self.attribute_hour(None, generation_records, interchange_records).carbon_intensity

    def attribute_hour(
        self,
        period: str | None,
        generation_records: Sequence[HourlyGenerationRecord],
        interchange_records: Sequence[HourlyInterchangeRecord],
    ) -> HourlyAttribution:
        """Run the full attribution for one hour.

        Args:
            period: Hour label carried into the result (e.g. "2024-01-01T05").
            generation_records: Generation-by-fuel records of that hour.
            interchange_records: Interchange records of that hour.

        Returns:
            HourlyAttribution: Generation, production emissions and carbon
            intensity per BA.
        """
        generation_records = list(generation_records)
        emissions = self.get_emissions_vector(generation_records)
        generation = self.get_generation_vector(generation_records)
        interchange = self.get_interchange_matrix(interchange_records)
        intensity = solve_carbon_intensity(emissions, interchange, generation)
        return HourlyAttribution(
            period=period,
            codes=self.registry.codes,
            generation=generation,
            emissions=emissions,
            carbon_intensity=intensity,
        )
