"""
National aggregate
==================

The national profile is an average of regional figures, not of raw
records: for each year, every region that has data for that year gets
equal weight. A small region therefore moves the national figure as much
as a large one.
"""

from __future__ import annotations
from typing import List, Sequence
from .models import (
    AGE_MONTHS, NATIONAL_DISPLAY_NAME, NATIONAL_REGION, RegionProfile,
    YearSummary, average, empty_wealth_dist, round1,
)


def all_years(regions: Sequence[RegionProfile]) -> List[int]:
    """Every year present in any region's history, ascending."""
    years = set()
    for r in regions:
        years.update(r.years)
    return sorted(years)


def national_year(regions: Sequence[RegionProfile], year: int) -> YearSummary:
    """Cross-section all regions for one year."""
    sum_val = sum_urban = sum_rural = sum_male = sum_female = 0.0
    count = count_urban = count_rural = count_male = count_female = 0
    wealth = empty_wealth_dist()
    ages: List[List[float]] = [[] for _ in range(AGE_MONTHS)]

    for r in regions:
        h = r.summary_for(year)
        if h is None:
            continue
        sum_val += h.value
        count += 1
        sum_urban += h.urban_avg
        count_urban += 1
        sum_rural += h.rural_avg
        count_rural += 1
        sum_male += h.male_avg
        count_male += 1
        sum_female += h.female_avg
        count_female += 1
        for q in wealth:
            wealth[q] += h.wealth_dist.get(q, 0)
        for i in range(AGE_MONTHS):
            ages[i].append(h.age_trend[i])

    return YearSummary(
        year=year,
        value=average(sum_val, count),
        urban_avg=average(sum_urban, count_urban),
        rural_avg=average(sum_rural, count_rural),
        male_avg=average(sum_male, count_male),
        female_avg=average(sum_female, count_female),
        wealth_dist=wealth,
        age_trend=tuple(round1(sum(v) / len(v)) if v else 0 for v in ages),
    )


def national_profile(regions: Sequence[RegionProfile]) -> RegionProfile:
    """Build the synthetic "National Average" profile.

    Pure function of `regions`; calling it twice gives equal results.
    """
    history = tuple(national_year(regions, y) for y in all_years(regions))
    return RegionProfile(
        region=NATIONAL_REGION,
        history=history,
        value=history[-1].value if history else 0,
        display_name=NATIONAL_DISPLAY_NAME,
    )
