"""
Data model (records, year summaries, region profiles)
=====================================================

Each survey row is converted into a `SurveyRecord`. Aggregation turns the
records into one `RegionProfile` per region, holding a `YearSummary` per
survey year.

Everything here is immutable (`frozen=True`):
- records cannot change after loading, and
- selecting a different year produces a new profile instead of editing one.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import math

AGE_MONTHS = 6
NATIONAL_REGION = "National Average"
NATIONAL_DISPLAY_NAME = "National Avg"


class Settlement(str, Enum):
    URBAN = "Urban"
    RURAL = "Rural"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: str) -> "Settlement":
        # exact, case-sensitive match only
        if raw == cls.URBAN.value:
            return cls.URBAN
        if raw == cls.RURAL.value:
            return cls.RURAL
        return cls.OTHER


class ChildSex(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: str) -> "ChildSex":
        if raw == cls.MALE.value:
            return cls.MALE
        if raw == cls.FEMALE.value:
            return cls.FEMALE
        return cls.OTHER


class WealthQuintile(str, Enum):
    POOREST = "Poorest"
    POORER = "Poorer"
    MIDDLE = "Middle"
    RICHER = "Richer"
    RICHEST = "Richest"

    @classmethod
    def parse(cls, raw: str) -> Optional["WealthQuintile"]:
        """Return the quintile for an exact name, or None for unknown values."""
        for q in cls:
            if raw == q.value:
                return q
        return None


def empty_wealth_dist() -> Dict[WealthQuintile, int]:
    return {q: 0 for q in WealthQuintile}


def round1(x: float) -> float:
    """Round to one decimal, half away from zero on the exact binary value.

    This is how a decimal string rendering rounds (0.25 -> 0.3), which
    differs from Python's round() (0.25 -> 0.2). NaN and inf pass through.
    """
    if not math.isfinite(x):
        return x
    return float(Decimal(x).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def average(total: float, count: int) -> float:
    """Rounded mean; 0 when there is nothing to average."""
    return round1(total / count) if count > 0 else 0


@dataclass(frozen=True)
class SurveyRecord:
    """One normalized survey respondent.

    `ebf_rate` is NaN and `age_month` is None when the raw text did not
    parse as a number.
    """
    region: str
    year: int
    ebf_rate: float
    settlement: Settlement
    child_sex: ChildSex
    wealth: Optional[WealthQuintile]
    age_month: Optional[int]


@dataclass(frozen=True)
class YearSummary:
    """Finalized statistics for one region (or the nation) in one year."""
    year: int
    value: float
    urban_avg: float = 0
    rural_avg: float = 0
    male_avg: float = 0
    female_avg: float = 0
    wealth_dist: Dict[WealthQuintile, int] = field(default_factory=empty_wealth_dist)
    # index i holds the average rate for infants aged i months
    age_trend: Tuple[float, ...] = (0,) * AGE_MONTHS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "value": self.value,
            "urbanAvg": self.urban_avg,
            "ruralAvg": self.rural_avg,
            "maleAvg": self.male_avg,
            "femaleAvg": self.female_avg,
            "wealthDist": {q.value: n for q, n in self.wealth_dist.items()},
            "ageTrend": {str(i): v for i, v in enumerate(self.age_trend)},
        }


@dataclass(frozen=True)
class RegionProfile:
    """All yearly summaries for one region.

    `history` is ascending by year with no duplicates. `value` is the
    figure for the active year (the latest year right after aggregation).
    """
    region: str
    history: Tuple[YearSummary, ...]
    value: float
    display_name: Optional[str] = None

    @property
    def years(self) -> List[int]:
        return [h.year for h in self.history]

    @property
    def latest(self) -> Optional[YearSummary]:
        return self.history[-1] if self.history else None

    @property
    def label(self) -> str:
        """Name shown to users: display name, else the region with
        "RegionIV"-style codes split after "Region"."""
        if self.display_name:
            return self.display_name
        name = self.region
        if name.startswith("Region") and " " not in name:
            name = name.replace("Region", "Region ", 1)
        return name

    def summary_for(self, year: int) -> Optional[YearSummary]:
        for h in self.history:
            if h.year == year:
                return h
        return None

    def at_year(self, year: int) -> "RegionProfile":
        """Return a copy whose `value` is that year's value (0 if absent)."""
        h = self.summary_for(year)
        return replace(self, value=h.value if h else 0)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "Region": self.region,
            "history": [h.to_dict() for h in self.history],
            "value": self.value,
        }
        if self.display_name:
            out["displayName"] = self.display_name
        return out
