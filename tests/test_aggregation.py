import math

import pytest

from shared.models.diagnostics import DiagnosticCode
from services.embodied_suffering.aggregation import aggregate_weighted
from services.embodied_suffering.models import WeightedInput


def test_all_resolved_is_plain_weighted_mean():
    result = aggregate_weighted([
        WeightedInput("A", 0.5, 2),
        WeightedInput("B", 0.5, 4),
    ])

    assert result.success
    assert result.value == pytest.approx(3.0)
    assert result.unresolved_weight_fraction == 0
    assert result.unresolved_keys == []
    assert result.diagnostics == []


def test_unresolved_item_is_dropped_and_reported():
    result = aggregate_weighted([
        WeightedInput("A", 0.6, 3),
        WeightedInput("B", 0.4, None),
    ])

    assert result.success
    assert result.value == pytest.approx(3.0)
    assert result.unresolved_weight_fraction == pytest.approx(0.4)
    assert result.used_weight == pytest.approx(0.6)
    assert result.missing_weight == pytest.approx(0.4)
    assert result.unresolved_keys == ["B"]
    assert result.has_code(DiagnosticCode.UNRESOLVED_KEYS)
    assert not result.errors


def test_nan_value_counts_as_unresolved():
    result = aggregate_weighted([
        WeightedInput("A", 0.5, 6),
        WeightedInput("B", 0.5, float("nan")),
    ])

    assert result.value == pytest.approx(6.0)
    assert result.unresolved_keys == ["B"]


def test_weights_not_summing_to_one_are_normalised_with_warning():
    result = aggregate_weighted([
        WeightedInput("A", 2.0, 1),
        WeightedInput("B", 2.0, 5),
    ])

    assert result.success
    assert result.value == pytest.approx(3.0)
    assert result.has_code(DiagnosticCode.WEIGHTS_RENORMALISED)


def test_small_deviation_within_tolerance_has_no_warning():
    result = aggregate_weighted([
        WeightedInput("A", 0.5, 1),
        WeightedInput("B", 0.505, 5),
    ])

    assert not result.has_code(DiagnosticCode.WEIGHTS_RENORMALISED)


def test_custom_tolerance():
    result = aggregate_weighted([WeightedInput("A", 0.95, 1)], tolerance=0.1)
    assert not result.has_code(DiagnosticCode.WEIGHTS_RENORMALISED)


def test_empty_input_fails():
    result = aggregate_weighted([])

    assert not result.success
    assert math.isnan(result.value)
    assert result.errors[0].code == DiagnosticCode.EMPTY_INPUT


def test_zero_total_weight_fails():
    result = aggregate_weighted([
        WeightedInput("A", 0.0, 3),
        WeightedInput("B", 0.0, 4),
    ])

    assert not result.success
    assert math.isnan(result.value)
    assert result.errors[0].code == DiagnosticCode.ZERO_TOTAL_WEIGHT


def test_all_unresolved_fails():
    result = aggregate_weighted([
        WeightedInput("A", 0.5, None),
        WeightedInput("B", 0.5, None),
    ])

    assert not result.success
    assert math.isnan(result.value)
    assert result.unresolved_weight_fraction == pytest.approx(1.0)
    assert result.unresolved_keys == ["A", "B"]
    assert result.errors[0].code == DiagnosticCode.ALL_VALUES_UNRESOLVED


def test_unresolved_keys_are_unique_and_ordered():
    result = aggregate_weighted([
        WeightedInput("B", 0.2, None),
        WeightedInput("A", 0.3, 1),
        WeightedInput("B", 0.1, None),
        WeightedInput("C", 0.4, None),
    ])

    assert result.unresolved_keys == ["B", "C"]
    assert result.unresolved_weight_fraction == pytest.approx(0.7)


@pytest.mark.parametrize("values", [
    [1, 2, 3],
    [None, 2, 3],
    [None, None, 3],
])
def test_unresolved_fraction_stays_in_unit_interval(values):
    items = [WeightedInput(i, w, v) for i, (w, v) in enumerate(zip([0.2, 0.3, 0.5], values))]
    result = aggregate_weighted(items)

    assert 0.0 <= result.unresolved_weight_fraction <= 1.0
