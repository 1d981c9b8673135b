"""
emissions/aggregate.py

Reduce one hour of raw records into the vectors and matrix of the
attribution system.

Responsibilities
----------------
- `generation_vector`: total generation per BA (``G``).
- `emissions_vector`: direct emissions per BA (``E``) using a factor table.
- `interchange_matrix`: directed BA × BA transfer matrix (``I``).

Conventions
-----------
- Output arrays are ``float64`` numpy arrays sized to the registry and
  indexed in registry order; BAs without records stay at 0.
- Records naming a BA outside the registry are ignored.
- Every function either returns a complete result or raises; the caller
  never observes a partially filled array.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from .factors import EmissionFactorTable
from .records import HourlyGenerationRecord, HourlyInterchangeRecord, parse_value
from .registry import BalancingAuthorityRegistry

logger = logging.getLogger(__name__)


def generation_vector(
    records: Iterable[HourlyGenerationRecord],
    registry: BalancingAuthorityRegistry,
) -> np.ndarray:
    """Sum generation across all fuel types for each BA.

    Args:
        records: Generation-by-fuel records for a single hour.
        registry: Registry fixing the output order.

    Returns:
        np.ndarray: ``G`` with ``G[i]`` the total generation of BA ``i``.

    Raises:
        ParseError: If a record value is not a finite number.
    """
    out = np.zeros(len(registry))
    for rec in records:
        i = registry.index_of(rec.respondent)
        value = parse_value(rec.value)
        if i is None:
            logger.debug("Ignoring generation for unregistered BA %s", rec.respondent)
            continue
        out[i] += value
    return out


def emissions_vector(
    records: Iterable[HourlyGenerationRecord],
    registry: BalancingAuthorityRegistry,
    factors: EmissionFactorTable,
) -> np.ndarray:
    """Compute direct (production) emissions for each BA.

    Each record contributes ``value × factor(fuel_type)`` to its respondent,
    where ``NG`` is looked up as ``GAS``.

    Args:
        records: Generation-by-fuel records for a single hour.
        registry: Registry fixing the output order.
        factors: Emission factor table.

    Returns:
        np.ndarray: ``E`` with ``E[i]`` the direct emissions of BA ``i``.

    Raises:
        UnrecognizedFuelTypeError: On the first fuel type missing from
            ``factors``; no vector is returned.
        ParseError: If a record value is not a finite number.
    """
    out = np.zeros(len(registry))
    for rec in records:
        # Lookup first so an unknown fuel fails the hour even for BAs we skip.
        factor = factors.factor_for(rec.fuel_type)
        value = parse_value(rec.value)
        i = registry.index_of(rec.respondent)
        if i is None:
            continue
        out[i] += value * factor
    return out


def interchange_matrix(
    records: Iterable[HourlyInterchangeRecord],
    registry: BalancingAuthorityRegistry,
) -> np.ndarray:
    """Build the directed transfer matrix for one hour.

    ``I[i, j]`` is the value of the last record seen for the pair
    ``(registry[i], registry[j])``. Duplicate pairs overwrite rather than
    sum, and a transfer recorded only as A→B leaves B→A at 0.

    Args:
        records: Interchange records for a single hour.
        registry: Registry fixing both matrix axes.

    Returns:
        np.ndarray: Square ``(n, n)`` matrix.

    Raises:
        ParseError: If a record value is not a finite number.
    """
    transfers: dict[tuple[int, int], float] = {}
    for rec in records:
        value = parse_value(rec.value)
        i = registry.index_of(rec.from_ba)
        j = registry.index_of(rec.to_ba)
        if i is None or j is None:
            logger.debug("Ignoring interchange %s->%s outside registry", rec.from_ba, rec.to_ba)
            continue
        transfers[(i, j)] = value

    n = len(registry)
    out = np.zeros((n, n))
    for (i, j), value in transfers.items():
        out[i, j] = value
    return out
