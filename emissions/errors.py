"""
emissions/errors.py

Typed failures raised by the attribution engine.

Every error here aborts the computation of the current hour; no partial
vector is ever returned alongside one. Callers decide whether to skip the
hour, surface the failure, or abort the batch.
"""

from __future__ import annotations


class EmissionsError(Exception):
    """Base class for attribution engine failures."""


class UnrecognizedFuelTypeError(EmissionsError):
    """A fuel type has no entry in the emission factor table.

    Attributes:
        fuel_type: The fuel type code as it appeared on the record, before
            alias normalisation.
    """

    def __init__(self, fuel_type: str):
        self.fuel_type = fuel_type
        super().__init__(
            f"Unrecognized fuel type, cannot accurately calculate emissions: {fuel_type}"
        )


class IllConditionedError(EmissionsError):
    """The attribution system is singular or too ill-conditioned to solve.

    Attributes:
        matrix: The system matrix ``A`` that failed the stability check.
        condition_number: ``κ(A)`` in the 2-norm (``inf`` when singular).
    """

    def __init__(self, matrix, condition_number: float):
        self.matrix = matrix
        self.condition_number = condition_number
        super().__init__(
            f"Attribution system is ill-conditioned (condition number {condition_number:.3e})"
        )


class ParseError(EmissionsError):
    """A record value is not a finite decimal number."""

    def __init__(self, value, field: str = "value"):
        self.value = value
        self.field = field
        super().__init__(f"Cannot parse {field} {value!r} as a finite number")
