"""
ingest/run.py

End-to-end orchestrator for hourly emissions attribution.

Responsibilities
----------------
- Compute a UTC hour window (either relative to "now" or explicitly provided)
  and split it into day-sized fetch windows.
- Fetch generation, interchange and region rows from the EIA API with
  bounded concurrency, isolating a failed fetch window from the others.
- Validate rows, group them by hour, and run the attribution engine for each
  hour on a bounded worker pool; an engine failure is recorded against its
  hour and never aborts the rest.
- Expose a CLI for ad-hoc runs.

Conventions
-----------
- All timestamps are handled in UTC.
- Window bounds are inclusive hours, matching the EIA API.
"""

from __future__ import annotations

import argparse
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from dateutil import parser as dtp
from pydantic import ValidationError

from emissions.calculator import CalculatorConfig, EmissionsCalculator, HourlyAttribution
from emissions.errors import EmissionsError

from .client import APIRequestError, fetch_fuel_type_data, fetch_interchange_data, fetch_region_data
from .transform import group_by_period, results_frame
from .validate import validate_generation, validate_interchange, validate_region

logger = logging.getLogger(__name__)

# Upper bound on hours requested per fetch window.
FETCH_WINDOW_HOURS = 24
DEFAULT_WORKERS = 4


@dataclass
class WindowRecords:
    """Validated records fetched for one or more windows."""

    generation: list = field(default_factory=list)
    interchange: list = field(default_factory=list)
    region: list = field(default_factory=list)

    def extend(self, other: WindowRecords):
        self.generation.extend(other.generation)
        self.interchange.extend(other.interchange)
        self.region.extend(other.region)


@dataclass
class RunResult:
    """Outcome of a run: solved hours, failed hours and failed fetch windows."""

    results: dict[str, HourlyAttribution] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    fetch_failures: dict[str, Exception] = field(default_factory=dict)

    def stats(self) -> dict[str, int]:
        return {
            "computed": len(self.results),
            "failed": len(self.failures),
            "failed_windows": len(self.fetch_failures),
        }


def parse_utc(s: str) -> datetime:
    """Parse an ISO-8601 string as a timezone-aware UTC datetime.

    Naive strings are taken to be UTC already.
    """
    dt = dtp.isoparse(s)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def split_window(start: datetime, end: datetime, hours: int = FETCH_WINDOW_HOURS):
    """Split the inclusive hour window [start, end] into chunks of ``hours``."""
    chunks = []
    cursor = start
    while cursor <= end:
        chunk_end = min(cursor + timedelta(hours=hours - 1), end)
        chunks.append((cursor, chunk_end))
        cursor = chunk_end + timedelta(hours=1)
    return chunks


def fetch_window(start: datetime, end: datetime) -> WindowRecords:
    """Fetch and validate the three record collections for one window.

    Raises:
        APIRequestError: If any of the three fetches fails.
        pydantic.ValidationError: If a row lacks a required field.
    """
    with ThreadPoolExecutor(max_workers=3) as executor:
        gen = executor.submit(fetch_fuel_type_data, start, end)
        ic = executor.submit(fetch_interchange_data, start, end)
        reg = executor.submit(fetch_region_data, start, end)
        return WindowRecords(
            generation=validate_generation(gen.result()),
            interchange=validate_interchange(ic.result()),
            region=validate_region(reg.result()),
        )


def fetch_records(
    start: datetime, end: datetime, max_workers: int = DEFAULT_WORKERS
) -> tuple[WindowRecords, dict[str, Exception]]:
    """Fetch every window of [start, end], isolating failed windows.

    A window fails as a whole when any of its fetches fails or any of its rows
    is missing a required field; the other windows are unaffected.

    Returns:
        The merged records of all successful windows and a mapping of
        "<start>/<end>" labels to the error of each failed window.
    """
    records = WindowRecords()
    failures: dict[str, Exception] = {}
    chunks = split_window(start, end)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(fetch_window, s, e): (s, e) for s, e in chunks}
        for fut in as_completed(futures):
            s, e = futures[fut]
            try:
                records.extend(fut.result())
            except (APIRequestError, ValidationError) as exc:
                label = f"{s.isoformat()}/{e.isoformat()}"
                logger.warning("Fetch failed for window %s: %s", label, exc)
                failures[label] = exc

    return records, failures


def compute_hours(
    calculator: EmissionsCalculator,
    generation: list,
    interchange: list,
    max_workers: int = DEFAULT_WORKERS,
) -> tuple[dict[str, HourlyAttribution], dict[str, Exception]]:
    """Run the attribution engine for every hour present in ``generation``.

    Hours are independent, so they are solved concurrently. A typed engine
    failure is recorded for its hour and the remaining hours still run.

    Returns:
        (results, failures) keyed by EIA period, each sorted by period.
    """
    gen_by_period = group_by_period(generation)
    ic_by_period = group_by_period(interchange)

    results: dict[str, HourlyAttribution] = {}
    failures: dict[str, Exception] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(
                calculator.attribute_hour, period, records, ic_by_period.get(period, [])
            ): period
            for period, records in gen_by_period.items()
        }
        for fut in as_completed(futures):
            period = futures[fut]
            try:
                results[period] = fut.result()
            except EmissionsError as exc:
                logger.warning("Hour %s failed: %s", period, exc)
                failures[period] = exc

    return dict(sorted(results.items())), dict(sorted(failures.items()))


def run(
    hours: int = 24,
    start_date: str | None = None,
    end_date: str | None = None,
    balancing_authorities: list[str] | None = None,
    max_workers: int = DEFAULT_WORKERS,
) -> RunResult:
    """Fetch a window of EIA data and attribute emissions for each hour.

    Args:
        hours: If `start_date` is not provided, cover this many hours back
            from the current UTC hour.
        start_date: Optional ISO-8601 UTC string for the first hour.
        end_date: Optional ISO-8601 UTC string for the last hour (inclusive).
        balancing_authorities: Optional registry override.
        max_workers: Bound on concurrent fetch windows and concurrent hours.

    Returns:
        RunResult: Per-hour results and failures.
    """
    now = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    end = parse_utc(end_date) if end_date else now
    start = parse_utc(start_date) if start_date else end - timedelta(hours=hours - 1)
    if start > end:
        raise ValueError(f"start {start.isoformat()} is after end {end.isoformat()}")

    calculator = EmissionsCalculator.from_config(
        CalculatorConfig(balancing_authorities=balancing_authorities)
    )
    logger.info(
        "Attributing %s to %s for %d balancing authorities",
        start.isoformat(),
        end.isoformat(),
        len(calculator.registry),
    )

    records, fetch_failures = fetch_records(start, end, max_workers=max_workers)
    results, failures = compute_hours(
        calculator, records.generation, records.interchange, max_workers=max_workers
    )
    return RunResult(results=results, failures=failures, fetch_failures=fetch_failures)


def main(argv=None):
    """CLI entry point for running the attribution.

    Args:
        argv: Optional list of CLI arguments (useful for testing).

    Returns:
        int: Exit code (0 when every hour succeeded, 1 otherwise).
    """
    parser = argparse.ArgumentParser()
    parser.add_argument("--hours", type=int, default=24, help="How many hours back to cover")
    parser.add_argument("--start-date")
    parser.add_argument("--end-date")
    parser.add_argument(
        "--ba",
        action="append",
        dest="balancing_authorities",
        help="Restrict to this balancing authority (repeatable)",
    )
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS)
    parser.add_argument("--output", help="Write the carbon intensity table to this CSV path")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    result = run(
        hours=args.hours,
        start_date=args.start_date,
        end_date=args.end_date,
        balancing_authorities=args.balancing_authorities,
        max_workers=args.workers,
    )

    if args.output and result.results:
        results_frame(result.results.values()).to_csv(args.output)

    for period, exc in result.failures.items():
        print(f"{period}: {exc}")
    print(f"Done. Stats: {result.stats()}")
    return 0 if not (result.failures or result.fetch_failures) else 1


if __name__ == "__main__":
    # Convert the `main()` return value into a process exit status.
    raise SystemExit(main())
