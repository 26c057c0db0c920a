"""
Core engine (ebfstat)
=====================

The engine is what a dashboard talks to. It works like this:

1) Load dataset -> raw rows
2) Aggregate once -> list of RegionProfile (sorted by name)
3) Keep the *current selection* (year, region) in DashboardState
4) Recompute the national profile from the regions whenever asked
5) Produce rankings, heatmap, KPIs and exports for the current selection

The region list is the single source of truth. Changing the active year
replaces it with a fresh list; profiles are never edited in place.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence
import math
import pandas as pd
from .aggregate import build_region_profiles
from .models import RegionProfile, round1
from .national import all_years, national_profile

EBF_TARGET = 70.0
HIGH_THRESHOLD = 50.0
MEDIUM_THRESHOLD = 30.0

RAW_EXPORT_COLUMNS = ["Region", "EBF_Rate", "Year", "Type", "Education", "Age_Month", "Wealth_Index", "Child_Sex"]


@dataclass(frozen=True)
class RankingRow:
    region: str
    year: int
    rate: float


@dataclass(frozen=True)
class NationalKpi:
    year: int
    value: float
    # value - target; positive means above target
    diff: float


@dataclass(frozen=True)
class RegionKpi:
    region: str
    label: str
    value: float
    # target - value; <= 0 means the target is met
    gap: float

    @property
    def target_met(self) -> bool:
        return self.gap <= 0


@dataclass
class DashboardState:
    """Current selection shown by the presentation layer."""
    selected_year: Optional[int] = None
    selected_region: Optional[str] = None


@dataclass
class EBFEngine:
    """EBF aggregation engine.

    The engine stores:
    - regions: aggregated profiles (value reflects the active year)
    - raw_rows: the rows as read, for raw export
    - state: current year / region selection
    """
    regions: List[RegionProfile]
    raw_rows: List[Mapping[str, Any]] = field(default_factory=list)
    target: float = EBF_TARGET
    dataset_path: Optional[str] = None
    # Stores CLI commands (for reproducibility in reports)
    command_log: List[str] = field(default_factory=list)
    state: DashboardState = field(init=False)

    def __post_init__(self) -> None:
        self.state = DashboardState(selected_year=self.latest_year())

    @classmethod
    def from_rows(cls, rows: Sequence[Mapping[str, Any]], *, strict: bool = False, **kwargs) -> "EBFEngine":
        rows = list(rows)
        return cls(regions=build_region_profiles(rows, strict=strict), raw_rows=rows, **kwargs)

    # ---------------- Lookup ----------------
    def list_regions(self) -> List[RegionProfile]:
        return list(self.regions)

    def years(self) -> List[int]:
        """All survey years, newest first."""
        return sorted(all_years(self.regions), reverse=True)

    def latest_year(self) -> Optional[int]:
        ys = all_years(self.regions)
        return ys[-1] if ys else None

    def find_region(self, name: str) -> RegionProfile:
        for r in self.regions:
            if r.region == name:
                return r
        raise KeyError(f"Unknown region: {name!r}")

    def national(self) -> RegionProfile:
        return national_profile(self.regions)

    # ---------------- Selection ----------------
    def set_active_year(self, year: int) -> None:
        """Make `year` active; each region's value becomes that year's value or 0."""
        self.regions = with_active_year(self.regions, year)
        self.state.selected_year = year

    def select_region(self, name: str) -> RegionProfile:
        region = self.find_region(name)
        self.state.selected_region = region.region
        return region

    def clear_selection(self) -> None:
        self.state.selected_region = None

    def current(self) -> RegionProfile:
        """Selected region, or the national profile when none is selected."""
        if self.state.selected_region is None:
            return self.national()
        return self.find_region(self.state.selected_region)

    def _year(self, year: Optional[int]) -> int:
        y = year if year is not None else self.state.selected_year
        if y is None:
            raise ValueError("No survey years loaded")
        return y

    # ---------------- Views ----------------
    def rankings(self, year: Optional[int] = None) -> List[RankingRow]:
        return ranking_table(self.regions, self._year(year))

    def heatmap(self) -> pd.DataFrame:
        return heatmap_frame(self.regions)

    def national_kpi(self, year: Optional[int] = None) -> Optional[NationalKpi]:
        """National value for the year and its distance from target; None if no data."""
        y = self._year(year)
        h = self.national().summary_for(y)
        if h is None:
            return None
        return NationalKpi(year=y, value=h.value, diff=round1(h.value - self.target))

    def region_kpi(self, name: Optional[str] = None) -> Optional[RegionKpi]:
        """KPI for a region (default: the selected one) at the active year."""
        name = name or self.state.selected_region
        if name is None:
            return None
        r = self.find_region(name)
        return RegionKpi(region=r.region, label=r.label, value=r.value, gap=round1(self.target - r.value))

    def compare(self, name: str, year: Optional[int] = None) -> Dict[str, Dict[str, float]]:
        """Urban/rural/male/female averages of a region next to the national ones."""
        y = self._year(year)
        h = self.find_region(name).summary_for(y)
        n = self.national().summary_for(y)
        dims = ("urban_avg", "rural_avg", "male_avg", "female_avg")
        return {
            "region": {d: getattr(h, d) if h else 0 for d in dims},
            "national": {d: getattr(n, d) if n else 0 for d in dims},
        }

    # ---------------- Export ----------------
    def export_rankings_csv(self, path: Optional[str] = None, year: Optional[int] = None) -> str:
        import csv
        y = self._year(year)
        path = path or f"ebf_rankings_{y}.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["Region", "Year", "Rate"])
            for row in ranking_table(self.regions, y):
                w.writerow([row.region, row.year, row.rate])
        return path

    def export_raw_csv(self, path: str = "ebf_full_raw_data.csv") -> str:
        import csv
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=RAW_EXPORT_COLUMNS, extrasaction="ignore")
            w.writeheader()
            for row in self.raw_rows:
                w.writerow({c: row.get(c, "") for c in RAW_EXPORT_COLUMNS})
        return path

    def export_json(self, path: str) -> str:
        """Export all region profiles and the national profile to JSON.

        NaN averages (from unparseable rates) are written as null.
        """
        import json
        payload = {
            "regions": [_json_safe(r.to_dict()) for r in self.regions],
            "national": _json_safe(self.national().to_dict()),
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        return path


# ---------------- Helpers ----------------
def with_active_year(regions: Sequence[RegionProfile], year: int) -> List[RegionProfile]:
    """New profile list with each value set to that year's value (0 if absent)."""
    return [r.at_year(year) for r in regions]


def ranking_table(regions: Sequence[RegionProfile], year: int) -> List[RankingRow]:
    """Regions with a positive rate for `year`, highest rate first."""
    rows = []
    for r in regions:
        h = r.summary_for(year)
        rows.append(RankingRow(region=r.region, year=year, rate=h.value if h else 0))
    # NaN rates fail the > 0 test and drop out
    rows = [x for x in rows if x.rate > 0]
    rows.sort(key=lambda x: x.rate, reverse=True)
    return rows


def heatmap_frame(regions: Sequence[RegionProfile]) -> pd.DataFrame:
    """Region x year matrix of values; NaN where a region has no data."""
    years = all_years(regions)
    data = []
    for r in regions:
        by_year = {h.year: h.value for h in r.history}
        data.append([by_year.get(y, math.nan) for y in years])
    df = pd.DataFrame(data, index=[r.region for r in regions], columns=years, dtype=float)
    df.index.name = "Region"
    return df


def trend_series(profile: RegionProfile, years: Sequence[int]) -> List[Optional[float]]:
    """Profile values aligned to a year axis, None where missing."""
    by_year = {h.year: h.value for h in profile.history}
    return [by_year.get(y) for y in years]


def rate_tier(value: float) -> str:
    if value >= HIGH_THRESHOLD:
        return "high"
    if value >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def map_tier(value: Optional[float]) -> str:
    """Map colouring: regions without a figure are drawn as "none"."""
    if value is None or value == 0:
        return "none"
    return rate_tier(value)


def heat_class(value: Optional[float]) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "null"
    return rate_tier(value)


def _json_safe(obj):
    if isinstance(obj, float) and math.isnan(obj):
        return None
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_json_safe(v) for v in obj]
    return obj
