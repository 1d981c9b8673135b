"""Emissions attribution engine for US balancing authorities."""

from . import aggregate, calculator, constants, errors, factors, records, registry, solver

__all__ = [
    "aggregate",
    "calculator",
    "constants",
    "errors",
    "factors",
    "records",
    "registry",
    "solver",
]
