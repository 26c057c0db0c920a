"""
Regional aggregation (records -> region profiles)
=================================================

One pass over the records builds a table:

    region -> year -> YearAccumulator

Each accumulator keeps running sums/counts. Finalizing turns it into a
`YearSummary` with rounded averages, and each region's summaries become a
`RegionProfile` whose history is sorted by year.

Example:
- `table["Region I"][2022].urban_count` is the number of urban records
  for Region I in 2022.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping
from functools import lru_cache
from pyuca import Collator
from .models import (
    AGE_MONTHS, ChildSex, RegionProfile, Settlement, SurveyRecord,
    WealthQuintile, YearSummary, average, empty_wealth_dist, round1,
)
from .loader import normalize_rows


@dataclass
class YearAccumulator:
    """Running sums/counts for one region-year."""
    year: int
    total: float = 0.0
    count: int = 0
    urban_sum: float = 0.0
    urban_count: int = 0
    rural_sum: float = 0.0
    rural_count: int = 0
    male_sum: float = 0.0
    male_count: int = 0
    female_sum: float = 0.0
    female_count: int = 0
    wealth_counts: Dict[WealthQuintile, int] = field(default_factory=empty_wealth_dist)
    age_buckets: List[List[float]] = field(default_factory=lambda: [[] for _ in range(AGE_MONTHS)])

    def add(self, rec: SurveyRecord) -> None:
        val = rec.ebf_rate
        # every record counts toward the overall average
        self.total += val
        self.count += 1

        if rec.settlement is Settlement.URBAN:
            self.urban_sum += val
            self.urban_count += 1
        elif rec.settlement is Settlement.RURAL:
            self.rural_sum += val
            self.rural_count += 1

        if rec.child_sex is ChildSex.MALE:
            self.male_sum += val
            self.male_count += 1
        elif rec.child_sex is ChildSex.FEMALE:
            self.female_sum += val
            self.female_count += 1

        if rec.wealth is not None:
            self.wealth_counts[rec.wealth] += 1

        if rec.age_month is not None and 0 <= rec.age_month < AGE_MONTHS:
            self.age_buckets[rec.age_month].append(val)

    def finalize(self) -> YearSummary:
        age_trend = tuple(
            round1(sum(b) / len(b)) if b else 0
            for b in self.age_buckets
        )
        return YearSummary(
            year=self.year,
            value=average(self.total, self.count),
            urban_avg=average(self.urban_sum, self.urban_count),
            rural_avg=average(self.rural_sum, self.rural_count),
            male_avg=average(self.male_sum, self.male_count),
            female_avg=average(self.female_sum, self.female_count),
            wealth_dist=dict(self.wealth_counts),
            age_trend=age_trend,
        )


def accumulate(records: Iterable[SurveyRecord]) -> Dict[str, Dict[int, YearAccumulator]]:
    """Group records by region and year in a single pass."""
    table: Dict[str, Dict[int, YearAccumulator]] = {}
    for rec in records:
        years = table.setdefault(rec.region, {})
        acc = years.get(rec.year)
        if acc is None:
            acc = years[rec.year] = YearAccumulator(year=rec.year)
        acc.add(rec)
    return table


def finalize_region(region: str, years: Mapping[int, YearAccumulator]) -> RegionProfile:
    history = tuple(years[y].finalize() for y in sorted(years))
    return RegionProfile(
        region=region,
        history=history,
        value=history[-1].value if history else 0,
    )


@lru_cache(maxsize=None)
def _collator() -> Collator:
    return Collator()


def region_sort_key(name: str):
    """Unicode collation key: "a" < "b" < "C", case breaks ties only."""
    return _collator().sort_key(name)


def aggregate_records(records: Iterable[SurveyRecord]) -> List[RegionProfile]:
    """Build region profiles, sorted by region name (Unicode collation)."""
    table = accumulate(records)
    profiles = [finalize_region(r, years) for r, years in table.items()]
    profiles.sort(key=lambda p: region_sort_key(p.region))
    return profiles


def build_region_profiles(rows: Iterable[Mapping[str, Any]], *, strict: bool = False) -> List[RegionProfile]:
    """Raw rows -> sorted region profiles (normalize, aggregate, finalize)."""
    return aggregate_records(normalize_rows(rows, strict=strict))
