import math

import pytest

from shared.models.diagnostics import DiagnosticCode
from services.embodied_suffering.models import Country
from services.embodied_suffering.score import (
    suffering_index,
    suffering_index_from_reference,
    suffering_index_per_country,
)


def test_country_above_threshold_is_culled(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.NORTH_KOREA], [0.3, 0.7])

    result = suffering_index([5, 50], breakdown, acceptable_threshold=10)

    assert result.value == pytest.approx(1.5)
    assert result.culled_countries == ["NorthKorea"]
    assert result.invalid_countries == []
    assert result.has_code(DiagnosticCode.VALUES_CULLED)
    assert result.success


def test_index_is_not_normalised(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.INDIA], [0.2, 0.3])

    result = suffering_index([2.0, 4.0], breakdown, acceptable_threshold=10)

    assert result.value == pytest.approx(0.2 * 2.0 + 0.3 * 4.0)


def test_nan_and_missing_values_count_as_zero(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.BRAZIL, Country.CANADA], [0.5, 0.3, 0.2])

    result = suffering_index([4.0, float("nan"), None], breakdown, acceptable_threshold=10)

    assert result.value == pytest.approx(2.0)
    assert result.invalid_countries == ["Brazil", "Canada"]
    assert result.has_code(DiagnosticCode.INVALID_VALUES)
    assert result.success


def test_value_equal_to_threshold_is_kept(make_breakdown):
    breakdown = make_breakdown([Country.CHINA], [1.0])

    result = suffering_index([10.0], breakdown, acceptable_threshold=10)

    assert result.value == pytest.approx(10.0)
    assert result.culled_countries == []


def test_all_culled_gives_zero_with_warning(make_breakdown):
    breakdown = make_breakdown([Country.NORTH_KOREA], [1.0])

    result = suffering_index([104.6], breakdown, acceptable_threshold=10)

    assert result.value == 0.0
    assert result.has_code(DiagnosticCode.ALL_ENTRIES_CULLED)


def test_reordering_pairs_does_not_change_index(make_breakdown):
    forward = make_breakdown([Country.CHINA, Country.INDIA, Country.BRAZIL], [0.2, 0.5, 0.3])
    reverse = make_breakdown([Country.BRAZIL, Country.INDIA, Country.CHINA], [0.3, 0.5, 0.2])

    a = suffering_index([2.8, 6.1, 1.8], forward, acceptable_threshold=10)
    b = suffering_index([1.8, 6.1, 2.8], reverse, acceptable_threshold=10)

    assert a.value == pytest.approx(b.value)


@pytest.mark.parametrize("counts", [[1.0], [1.0, 2.0, 3.0]])
def test_length_mismatch_aborts(make_breakdown, counts):
    breakdown = make_breakdown([Country.CHINA, Country.INDIA], [0.5, 0.5])

    result = suffering_index(counts, breakdown, acceptable_threshold=10)

    assert math.isnan(result.value)
    assert result.errors[0].code == DiagnosticCode.LENGTH_MISMATCH
    assert result.culled_countries == []


def test_zero_ratios_fail(make_breakdown):
    breakdown = make_breakdown([Country.CHINA], [0.0])

    result = suffering_index([3.0], breakdown, acceptable_threshold=10)

    assert math.isnan(result.value)
    assert result.errors[0].code == DiagnosticCode.ZERO_TOTAL_WEIGHT


def test_empty_input_fails(make_breakdown):
    result = suffering_index([], make_breakdown([], []), acceptable_threshold=10)

    assert math.isnan(result.value)
    assert result.errors[0].code == DiagnosticCode.EMPTY_INPUT


def test_default_threshold_comes_from_settings(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.NORTH_KOREA], [0.5, 0.5])

    result = suffering_index([2.0, 104.6], breakdown)

    assert result.culled_countries == ["NorthKorea"]


# ===================================================================
# Per-country contributions
# ===================================================================


def test_per_country_contributions(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.INDIA, Country.BRAZIL], [0.5, 0.3, 0.2])

    result = suffering_index_per_country([2.0, float("nan"), 50.0], breakdown)

    assert result.success
    assert result.export_countries == ["China", "India", "Brazil"]
    assert result.contributions == pytest.approx([1.0, 0.0, 10.0])
    assert result.invalid_countries == ["India"]
    assert result.has_code(DiagnosticCode.INVALID_VALUES)


def test_per_country_length_mismatch_returns_nothing(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.INDIA], [0.5, 0.5])

    result = suffering_index_per_country([2.0], breakdown)

    assert not result.success
    assert result.contributions == []
    assert result.errors[0].code == DiagnosticCode.LENGTH_MISMATCH


# ===================================================================
# Global Slavery Index lookup
# ===================================================================


def test_from_reference_uses_global_slavery_index(context, make_breakdown):
    breakdown = make_breakdown(
        [Country.CHINA, Country.INDIA, Country.NORTH_KOREA, Country.GERMANY],
        [0.4, 0.3, 0.2, 0.1],
    )

    result = suffering_index_from_reference(context, breakdown, acceptable_threshold=10)

    assert result.value == pytest.approx(0.4 * 2.8 + 0.3 * 6.1)
    assert result.culled_countries == ["NorthKorea"]
    assert result.invalid_countries == ["Germany"]


# ===================================================================
# Import ratio totals
# ===================================================================


def test_ratios_off_one_are_flagged(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.INDIA], [0.2, 0.2])

    result = suffering_index([1.0, 2.0], breakdown, acceptable_threshold=10)

    assert result.value == pytest.approx(0.6)
    assert result.success
    warning = result.warnings[0]
    assert warning.code == DiagnosticCode.WEIGHTS_RENORMALISED
    assert warning.context["total_weight"] == pytest.approx(0.4)


def test_ratios_within_tolerance_are_not_flagged(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.INDIA], [0.5, 0.495])

    result = suffering_index([1.0, 2.0], breakdown, acceptable_threshold=10, tolerance=0.01)

    assert not result.has_code(DiagnosticCode.WEIGHTS_RENORMALISED)


def test_per_country_flags_ratio_total(make_breakdown):
    breakdown = make_breakdown([Country.CHINA, Country.INDIA], [0.7, 0.7])

    result = suffering_index_per_country([1.0, 2.0], breakdown)

    assert result.success
    assert result.has_code(DiagnosticCode.WEIGHTS_RENORMALISED)
    assert result.contributions == pytest.approx([0.7, 1.4])
