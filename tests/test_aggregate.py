"""Tests for the generation, emissions and interchange aggregators."""

from __future__ import annotations

import random

import numpy as np
import pytest

from emissions.aggregate import emissions_vector, generation_vector, interchange_matrix
from emissions.errors import ParseError, UnrecognizedFuelTypeError
from emissions.factors import EmissionFactorTable
from emissions.records import HourlyGenerationRecord, HourlyInterchangeRecord
from emissions.registry import BalancingAuthorityRegistry

REGISTRY = BalancingAuthorityRegistry(["BA1", "BA2", "BA3"])
FACTORS = EmissionFactorTable({"EF_1": 0.5, "EF_2": 2, "EF_3": 10, "GAS": 30})


def gen(respondent, value, fueltype="EF_1"):
    return HourlyGenerationRecord(
        period="2023-01-01T00", respondent=respondent, fueltype=fueltype, value=value
    )


def ic(fromba, toba, value):
    return HourlyInterchangeRecord(period="2023-01-01T00", fromba=fromba, toba=toba, value=value)


def test_generation_vector_sums_per_ba():
    """Generation across fuel types should be summed per respondent."""

    records = [gen("BA1", "100", "COAL"), gen("BA1", "200", "GAS"), gen("BA2", "300", "SOLAR")]

    result = generation_vector(records, REGISTRY)

    assert result.tolist() == [300, 300, 0]


def test_generation_vector_decimals():
    records = [gen("BA1", "100.5"), gen("BA1", "200.1"), gen("BA2", "300.7")]

    result = generation_vector(records, REGISTRY)

    assert result.tolist() == pytest.approx([300.6, 300.7, 0])


def test_generation_vector_permutation_invariant():
    """Shuffling input records should not change the totals."""

    records = [gen(ba, str(v)) for ba in ("BA1", "BA2", "BA3") for v in (1.5, 2.25, 10, 0.125)]
    shuffled = records[:]
    random.Random(7).shuffle(shuffled)

    assert generation_vector(shuffled, REGISTRY).tolist() == pytest.approx(
        generation_vector(records, REGISTRY).tolist()
    )


def test_generation_vector_ignores_unregistered_ba():
    records = [gen("BA1", "10"), gen("ZZZ", "99")]

    assert generation_vector(records, REGISTRY).tolist() == [10, 0, 0]


def test_empty_records_produce_zeros():
    """With no records every vector entry and matrix cell should be zero."""

    assert generation_vector([], REGISTRY).tolist() == [0, 0, 0]
    assert emissions_vector([], REGISTRY, FACTORS).tolist() == [0, 0, 0]
    assert interchange_matrix([], REGISTRY).tolist() == [[0, 0, 0], [0, 0, 0], [0, 0, 0]]


def test_emissions_vector_uses_factors():
    records = [gen("BA1", "100.6", "EF_1"), gen("BA2", "200", "EF_2"), gen("BA3", "300.5", "EF_3")]

    result = emissions_vector(records, REGISTRY, FACTORS)

    assert result.tolist() == pytest.approx([50.3, 400, 3005])


def test_emissions_vector_aggregates_same_ba():
    records = [gen("BA2", "100", "EF_1"), gen("BA2", "100", "EF_2"), gen("BA2", "100", "EF_3")]

    assert emissions_vector(records, REGISTRY, FACTORS).tolist() == [0, 1250, 0]


def test_emissions_vector_treats_ng_as_gas():
    """NG and GAS records should contribute identically."""

    records = [gen("BA3", "100", "NG"), gen("BA3", "100", "GAS")]

    assert emissions_vector(records, REGISTRY, FACTORS).tolist() == [0, 0, 6000]


def test_emissions_vector_unknown_fuel_fails_whole_hour():
    """An unknown fuel type should raise before any vector is returned."""

    records = [gen("BA1", "100", "EF_1"), gen("BA1", "100", "INVALID_FUEL")]

    with pytest.raises(UnrecognizedFuelTypeError) as exc:
        emissions_vector(records, REGISTRY, FACTORS)

    assert exc.value.fuel_type == "INVALID_FUEL"


def test_malformed_value_raises_parse_error():
    with pytest.raises(ParseError):
        generation_vector([gen("BA1", "n/a")], REGISTRY)
    with pytest.raises(ParseError):
        emissions_vector([gen("BA1", "NaN")], REGISTRY, FACTORS)
    with pytest.raises(ParseError):
        interchange_matrix([ic("BA1", "BA2", "")], REGISTRY)


def test_interchange_matrix_multiple_transfers():
    records = [
        ic("BA1", "BA2", "100.5"),
        ic("BA1", "BA3", "200.1"),
        ic("BA2", "BA3", "300.7"),
        ic("BA3", "BA1", "400.2"),
    ]

    result = interchange_matrix(records, REGISTRY)

    np.testing.assert_array_equal(
        result, [[0, 100.5, 200.1], [0, 0, 300.7], [400.2, 0, 0]]
    )


def test_interchange_matrix_last_record_wins():
    """Duplicate (from, to) pairs should keep the last value, not the sum."""

    records = [ic("BA1", "BA2", "100"), ic("BA1", "BA2", "200")]

    result = interchange_matrix(records, REGISTRY)

    assert result.tolist() == [[0, 200, 0], [0, 0, 0], [0, 0, 0]]


def test_interchange_matrix_not_symmetrized():
    result = interchange_matrix([ic("BA2", "BA1", "-75")], REGISTRY)

    assert result[1, 0] == -75
    assert result[0, 1] == 0
