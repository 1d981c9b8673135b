"""
emissions/solver.py

Consumption-based carbon intensity from production emissions and interchange.

The system solved for one hour is::

    imports[i, j]    = max(0, -I[i, j])
    total_imports[i] = sum_j imports[i, j]
    A                = diag(G + total_imports) - imports
    A @ x            = E

With EIA-930 interchange, a negative ``I[i, j]`` means BA ``i`` received
energy from BA ``j``; only those inbound flows count as imports. Exports are
already part of the exporter's own generation. The diagonal is each BA's
total throughput (own generation plus imports), and ``x`` apportions direct
emissions across the energy each BA actually consumes.
"""

from __future__ import annotations

import numpy as np

from .errors import IllConditionedError


def system_matrix(interchange: np.ndarray, generation: np.ndarray) -> np.ndarray:
    """Return the attribution matrix ``A`` for one hour."""
    imports = np.maximum(0.0, -interchange)
    total_imports = imports.sum(axis=1)
    return np.diag(generation + total_imports) - imports


def solve_carbon_intensity(emissions, interchange, generation) -> np.ndarray:
    """Solve for the consumption-based carbon intensity of every BA.

    Args:
        emissions: Direct emissions vector ``E`` (length n).
        interchange: Interchange matrix ``I`` (n × n).
        generation: Generation vector ``G`` (length n).

    Returns:
        np.ndarray: Carbon intensity vector ``x`` (length n), in emissions
        per unit of energy, in the same order as the inputs.

    Raises:
        ValueError: If the shapes of the inputs disagree.
        IllConditionedError: If ``κ(A)`` exceeds ``1 / eps`` or ``A`` is
            singular, or if a total or the solution is not finite.
    """
    E = np.asarray(emissions, dtype=float)
    I = np.asarray(interchange, dtype=float)  # noqa: E741
    G = np.asarray(generation, dtype=float)

    if E.ndim != 1:
        raise ValueError(f"emissions must be one-dimensional, got shape {E.shape}")
    n = E.shape[0]
    if G.shape != (n,) or I.shape != (n, n):
        raise ValueError(
            f"Shape mismatch: emissions {E.shape}, interchange {I.shape}, generation {G.shape}"
        )

    with np.errstate(over="ignore", invalid="ignore"):
        A = system_matrix(I, G)

    # Overflowed totals cannot be apportioned.
    if not (np.isfinite(E).all() and np.isfinite(A).all()):
        raise IllConditionedError(A, float("inf"))

    # Stability gate: refuse to return a numerically meaningless solution.
    with np.errstate(divide="ignore", invalid="ignore"):
        cond = np.linalg.cond(A)
    if not cond <= 1.0 / np.finfo(A.dtype).eps:
        raise IllConditionedError(A, float(cond))

    try:
        x = np.linalg.solve(A, E)
    except np.linalg.LinAlgError:
        raise IllConditionedError(A, float("inf")) from None
    if not np.isfinite(x).all():
        raise IllConditionedError(A, float(cond))
    return x
