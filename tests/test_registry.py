"""Tests for the balancing authority registry and emission factor table."""

from __future__ import annotations

import pytest

from emissions.constants import CO2_EMISSIONS_FACTORS, DEFAULT_BALANCING_AUTHORITIES
from emissions.errors import UnrecognizedFuelTypeError
from emissions.factors import EmissionFactorTable, normalize_fuel_type
from emissions.registry import BalancingAuthorityRegistry


def test_registry_preserves_order_and_indexes():
    registry = BalancingAuthorityRegistry(["PJM", "MISO", "CISO"])

    assert registry.codes == ("PJM", "MISO", "CISO")
    assert registry.index_of("MISO") == 1
    assert registry.index_of("ERCO") is None
    assert len(registry) == 3
    assert "CISO" in registry


def test_registry_defaults_to_built_in_list():
    registry = BalancingAuthorityRegistry()

    assert registry.codes == DEFAULT_BALANCING_AUTHORITIES
    assert len(set(DEFAULT_BALANCING_AUTHORITIES)) == len(DEFAULT_BALANCING_AUTHORITIES)


def test_registry_rejects_duplicates_and_empty():
    with pytest.raises(ValueError):
        BalancingAuthorityRegistry(["BA1", "BA1"])
    with pytest.raises(ValueError):
        BalancingAuthorityRegistry([])


def test_factor_table_normalizes_ng():
    """NG should be looked up under GAS."""

    table = EmissionFactorTable({"GAS": 469})

    assert normalize_fuel_type("NG") == "GAS"
    assert table.factor_for("NG") == table.factor_for("GAS") == 469


def test_factor_table_unknown_fuel_keeps_original_code():
    table = EmissionFactorTable({"COL": 1000})

    with pytest.raises(UnrecognizedFuelTypeError) as exc:
        table.factor_for("NG")

    # The error reports the code as received, not the normalised one.
    assert exc.value.fuel_type == "NG"


def test_factor_table_is_read_only_copy():
    source = {"COL": 1000}
    table = EmissionFactorTable(source)
    source["COL"] = 0

    assert table["COL"] == 1000
    with pytest.raises(TypeError):
        table["COL"] = 1  # type: ignore[index]


def test_factor_table_rejects_negative():
    with pytest.raises(ValueError):
        EmissionFactorTable({"COL": -1})


def test_default_factor_table():
    table = EmissionFactorTable()

    assert dict(table) == {k: float(v) for k, v in CO2_EMISSIONS_FACTORS.items()}
