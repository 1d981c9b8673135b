"""
ingest/plugin.py

Host adapter exposing the attribution pipeline as an `execute` plugin.

Responsibilities
----------------
- Validate plugin configuration (`PluginConfig`) and each input
  (`PluginInput`: a `timestamp` and a `duration` in seconds).
- For every input, fetch the covered hours from the EIA API, attribute each
  hour, and emit one output row per hour and balancing authority.
- Apply the configured per-hour error policy: "skip" logs and drops failed
  hours or windows, "raise" propagates the first failure.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from emissions.calculator import CalculatorConfig, EmissionsCalculator

from .client import APIRequestError
from .run import DEFAULT_WORKERS, compute_hours, fetch_window
from .transform import to_rows

logger = logging.getLogger(__name__)


class PluginConfig(CalculatorConfig):
    """Calculator overrides plus the adapter's own settings."""

    on_error: Literal["skip", "raise"] = "skip"
    max_workers: int = Field(default=DEFAULT_WORKERS, gt=0)


class PluginInput(BaseModel):
    """A single observation window requested by the host."""

    model_config = ConfigDict(extra="allow")

    timestamp: datetime
    duration: float = Field(gt=0)

    @field_validator("timestamp")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def window(self) -> tuple[datetime, datetime]:
        """Return the inclusive hour window covered by this input."""
        start = self.timestamp.replace(minute=0, second=0, microsecond=0)
        end = self.timestamp + timedelta(seconds=self.duration)
        return start, end.replace(minute=0, second=0, microsecond=0)


class USGridEmissionsPlugin:
    """Attribute hourly US grid emissions for host-supplied time windows."""

    metadata = {"kind": "execute"}

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = self.config_validation(config or {})
        self.calculator = EmissionsCalculator.from_config(self.config)

    @staticmethod
    def config_validation(config: dict[str, Any]) -> PluginConfig:
        return PluginConfig.model_validate(config)

    @staticmethod
    def input_validation(params: dict[str, Any]) -> PluginInput:
        return PluginInput.model_validate(params)

    def execute(self, inputs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Return per-hour, per-BA emissions rows for every input window.

        Raises:
            pydantic.ValidationError: For an invalid input.
            APIRequestError: When a fetch fails and `on_error` is "raise".
            pydantic.ValidationError: When a fetched row is malformed and
                `on_error` is "raise".
            EmissionsError: When an hour fails and `on_error` is "raise".
        """
        outputs: list[dict[str, Any]] = []

        for raw in inputs:
            start, end = self.input_validation(raw).window()
            try:
                records = fetch_window(start, end)
            except (APIRequestError, ValidationError) as exc:
                if self.config.on_error == "raise":
                    raise
                logger.warning("Skipping window %s..%s: %s", start, end, exc)
                continue

            results, failures = compute_hours(
                self.calculator,
                records.generation,
                records.interchange,
                max_workers=self.config.max_workers,
            )
            if failures and self.config.on_error == "raise":
                raise next(iter(failures.values()))

            for result in results.values():
                outputs.extend(to_rows(result))

        return outputs
