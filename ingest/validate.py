"""
ingest/validate.py

Validation and typing layer for raw EIA-930 rows.

Responsibilities
----------------
- Turn raw row dicts (as returned by `requests` JSON) into the engine's
  typed records.
- Drop rows whose `value` is missing (EIA publishes null for hours a BA has
  not reported yet) so they neither count as zero nor fail the hour.

Conventions
-----------
- Wire field names are kept (`fueltype`, `fromba`, `toba`, ...); the
  record models accept them as aliases.
- Values are kept as strings. Numbers returned by the API are converted
  with `str` so parsing stays in one place (`emissions.records.parse_value`).
- Non-empty but malformed values are NOT filtered here; they surface as a
  `ParseError` for the hour that contains them.
"""

from __future__ import annotations

import logging
from typing import Any

from emissions.records import HourlyGenerationRecord, HourlyInterchangeRecord, HourlyRegionRecord

logger = logging.getLogger(__name__)


def _clean(rec: dict[str, Any]) -> dict[str, Any] | None:
    v = rec.get("value")
    if v in (None, ""):
        return None
    if not isinstance(v, str):
        rec = {**rec, "value": str(v)}
    return rec


def _validate_rows(rows, model):
    out = []
    dropped = 0
    for rec in rows:
        cleaned = _clean(rec)
        if cleaned is None:
            dropped += 1
            continue
        out.append(model.model_validate(cleaned))
    if dropped:
        logger.info("Dropped %d %s rows without a value", dropped, model.__name__)
    return out


def validate_generation(rows: list[dict[str, Any]]) -> list[HourlyGenerationRecord]:
    """Validate fuel-type rows.

    Args:
        rows: Raw fuel-type rows from the EIA API.

    Returns:
        list[HourlyGenerationRecord]: Rows with a value, in input order.

    Raises:
        pydantic.ValidationError: If a row lacks a required field
            (`period`, `respondent`, `fueltype`).
    """
    return _validate_rows(rows, HourlyGenerationRecord)


def validate_interchange(rows: list[dict[str, Any]]) -> list[HourlyInterchangeRecord]:
    """Validate interchange rows (`period`, `fromba`, `toba`, `value`).

    Args:
        rows: Raw interchange rows from the EIA API.

    Returns:
        list[HourlyInterchangeRecord]: Rows with a value, in input order.

    Raises:
        pydantic.ValidationError: If a row lacks a required field.
    """
    return _validate_rows(rows, HourlyInterchangeRecord)


def validate_region(rows: list[dict[str, Any]]) -> list[HourlyRegionRecord]:
    """Validate region rows (`period`, `respondent`, `type`, `value`).

    Args:
        rows: Raw region rows from the EIA API.

    Returns:
        list[HourlyRegionRecord]: Rows with a value, in input order.

    Raises:
        pydantic.ValidationError: If a row lacks a required field.
    """
    return _validate_rows(rows, HourlyRegionRecord)
