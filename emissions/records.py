"""
emissions/records.py

Typed hourly records consumed by the attribution engine.

Responsibilities
----------------
- Define pydantic models mirroring the EIA-930 Hourly Electric Grid Monitor
  row shapes (fuel type generation, interchange, region data).
- Accept the upstream wire names (``fueltype``, ``fromba``, ``toba``,
  ``respondent-name`` ...) as aliases while exposing snake_case attributes.
- Provide `parse_value`, the single place where decimal strings become floats.

Notes
-----
- ``value`` is kept as the decimal string received on the wire. Parsing is
  deferred to the aggregators so that a malformed value fails the hour that
  contains it, not the whole fetch.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from .errors import ParseError


class _HourlyRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    period: str
    value: str
    value_units: str | None = Field(default=None, alias="value-units")


class HourlyGenerationRecord(_HourlyRecord):
    """Net generation of one BA from one fuel type during one hour."""

    respondent: str
    respondent_name: str | None = Field(default=None, alias="respondent-name")
    fuel_type: str = Field(alias="fueltype")
    type_name: str | None = Field(default=None, alias="type-name")


class HourlyInterchangeRecord(_HourlyRecord):
    """Net energy transferred from ``from_ba`` to ``to_ba`` during one hour."""

    from_ba: str = Field(alias="fromba")
    from_ba_name: str | None = Field(default=None, alias="fromba-name")
    to_ba: str = Field(alias="toba")
    to_ba_name: str | None = Field(default=None, alias="toba-name")


class HourlyRegionRecord(_HourlyRecord):
    """Demand (D), net generation (NG) or total interchange (TI) of one BA."""

    respondent: str
    respondent_name: str | None = Field(default=None, alias="respondent-name")
    type: str
    type_name: str | None = Field(default=None, alias="type-name")


def parse_value(value) -> float:
    """Parse a record value into a finite float.

    Args:
        value: Decimal string (or number) taken from a record.

    Returns:
        float: The parsed value.

    Raises:
        ParseError: If the value is not numeric, or is NaN/infinite.
    """
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(value) from exc
    if not math.isfinite(parsed):
        raise ParseError(value)
    return parsed
