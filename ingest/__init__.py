"""Data retrieval and orchestration around the emissions attribution engine."""

from . import client, plugin, run, transform, validate

__all__ = ["client", "plugin", "run", "transform", "validate"]
