"""
ingest/transform.py

Shaping layer between validated records, the engine, and outputs.

Responsibilities
----------------
- Split a window of records into per-hour slices (`group_by_period`).
- Map per-hour engine results to host output rows (`to_rows`).
- Build a wide pandas DataFrame of results for CLI reporting
  (`results_frame`).
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

import pandas as pd

from emissions.calculator import HourlyAttribution

# Every EIA-930 period is one hour.
PERIOD_SECONDS = 3600


def group_by_period(records: Iterable) -> dict[str, list]:
    """Group records by their `period`, preserving input order within a period."""
    out = defaultdict(list)
    for rec in records:
        out[rec.period].append(rec)
    return dict(out)


def period_to_iso(period: str) -> str:
    """Convert an EIA hourly period ("2024-01-01T05") to "2024-01-01T05:00Z"."""
    return f"{period}:00Z"


def to_rows(result: HourlyAttribution) -> list[dict]:
    """Return one output row per balancing authority for an hourly result.

    Args:
        result: Engine output for one hour.

    Returns:
        list[dict]: Rows with `timestamp`, `duration`, `balancing-authority`,
        `emissions` (direct) and `carbon-intensity` keys, in registry order.
    """
    timestamp = period_to_iso(result.period)
    rows = []
    for code, emissions, intensity in zip(
        result.codes, result.emissions, result.carbon_intensity
    ):
        rows.append(
            {
                "timestamp": timestamp,
                "duration": PERIOD_SECONDS,
                "balancing-authority": code,
                "emissions": float(emissions),
                "carbon-intensity": float(intensity),
            }
        )
    return rows


def results_frame(results: Iterable[HourlyAttribution], field: str = "carbon_intensity") -> pd.DataFrame:
    """Return a wide DataFrame of ``field`` indexed by UTC hour, one column per BA."""
    data = {}
    for result in results:
        ts = pd.Timestamp(period_to_iso(result.period))
        data[ts] = result.as_dict(field)
    frame = pd.DataFrame.from_dict(data, orient="index")
    frame.index.name = "datetime_utc"
    return frame.sort_index()
