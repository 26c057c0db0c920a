"""
Tests of ebfstat.aggregate and the rounding helpers in ebfstat.models
"""

from __future__ import annotations

import math

import pytest

from ebfstat.aggregate import accumulate, aggregate_records, build_region_profiles
from ebfstat.loader import normalize_rows
from ebfstat.models import WealthQuintile, average, round1


def _by_name(profiles):
    return {p.region: p for p in profiles}


def test_region_scenario(scenario_profiles):
    profiles = _by_name(scenario_profiles)
    a = profiles["A"].summary_for(2022)
    b = profiles["B"].summary_for(2022)

    assert (a.value, a.urban_avg, a.rural_avg) == (50.0, 40.0, 60.0)
    assert (a.male_avg, a.female_avg) == (40.0, 60.0)
    assert (b.value, b.urban_avg, b.rural_avg) == (80.0, 80.0, 0)
    assert b.female_avg == 0
    assert profiles["A"].value == 50.0


def test_wealth_and_age_buckets(scenario_profiles):
    a = _by_name(scenario_profiles)["A"].summary_for(2022)

    assert a.wealth_dist == {
        WealthQuintile.POOREST: 1,
        WealthQuintile.POORER: 0,
        WealthQuintile.MIDDLE: 0,
        WealthQuintile.RICHER: 0,
        WealthQuintile.RICHEST: 1,
    }
    assert a.age_trend == (40.0, 60.0, 0, 0, 0, 0)


def test_age_outside_range_only_leaves_age_trend(row):
    (p,) = build_region_profiles([row(rate="50", age="6"), row(rate="70", age="0")])
    h = p.history[0]

    assert h.value == 60.0
    assert h.age_trend == (70.0, 0, 0, 0, 0, 0)


def test_unknown_wealth_still_counts_toward_total(row):
    records = normalize_rows([row(rate="40", wealth="Unknown"), row(rate="60", wealth="Middle")])
    acc = accumulate(records)["A"][2022]

    assert acc.count == 2
    assert sum(acc.wealth_counts.values()) == 1
    assert acc.finalize().value == 50.0


def test_unknown_categories_only_leave_their_dimension(row):
    (p,) = build_region_profiles([row(rate="30", type_="urban", sex="")])
    h = p.history[0]

    assert h.value == 30.0
    assert (h.urban_avg, h.rural_avg, h.male_avg, h.female_avg) == (0, 0, 0, 0)


def test_history_sorted_and_value_is_latest(row):
    rows = [
        row(year="2023", rate="10"),
        row(year="2021", rate="30"),
        row(year="2022", rate="20"),
        row(year="2021", rate="50"),
    ]
    (p,) = build_region_profiles(rows)

    assert p.years == [2021, 2022, 2023]
    assert len(set(p.years)) == len(p.years)
    assert p.value == 10.0
    assert p.summary_for(2021).value == 40.0


def test_result_does_not_depend_on_row_order(multi_year_rows):
    forward = build_region_profiles(multi_year_rows)
    backward = build_region_profiles(list(reversed(multi_year_rows)))
    assert forward == backward


def test_regions_sorted_by_name(row):
    profiles = build_region_profiles([row(region="Caraga"), row(region="BARMM"), row(region="NCR")])
    assert [p.region for p in profiles] == ["BARMM", "Caraga", "NCR"]


def test_regions_sorted_ignoring_case_first(row):
    profiles = build_region_profiles([row(region="b"), row(region="C"), row(region="a")])
    assert [p.region for p in profiles] == ["a", "b", "C"]


def test_age_bucket_mean_is_rounded(row):
    rows = [row(rate="33", age="2"), row(rate="34", age="2"), row(rate="34", age="2")]
    (p,) = build_region_profiles(rows)
    assert p.history[0].age_trend[2] == 33.7


def test_unparseable_rate_corrupts_average_by_default(row):
    rows = [row(rate="40"), row(rate="n/a"), row(region="B", rate="80")]
    profiles = _by_name(build_region_profiles(rows))

    assert math.isnan(profiles["A"].value)
    assert math.isnan(profiles["A"].history[0].urban_avg)
    assert profiles["B"].value == 80.0


def test_unparseable_rate_is_excluded_in_strict_mode(row):
    rows = [row(rate="40"), row(rate="n/a"), row(region="B", rate="80")]
    profiles = _by_name(build_region_profiles(rows, strict=True))

    assert profiles["A"].value == 40.0
    assert profiles["B"].value == 80.0


def test_no_records_no_regions():
    assert aggregate_records([]) == []


@pytest.mark.parametrize(
    "x, expected",
    (
        pytest.param(0.25, 0.3, id="half-up"),
        pytest.param(-0.25, -0.3, id="half-away-from-zero"),
        pytest.param(1 / 3, 0.3, id="third"),
        pytest.param(66.66, 66.7, id="two-decimals"),
        pytest.param(50.0, 50.0, id="exact"),
    ),
)
def test_round1(x, expected):
    assert round1(x) == expected


def test_round1_passes_nan_through():
    assert math.isnan(round1(math.nan))


def test_average_of_nothing_is_zero():
    assert average(0.0, 0) == 0
    assert average(123.0, 0) == 0
    assert average(0.5, 2) == 0.3
