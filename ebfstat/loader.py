"""
Dataset loader (CSV/Excel -> SurveyRecord list)
===============================================

This module reads the survey export and converts each row into a
`SurveyRecord`.

Key ideas:
- Files are read with every column as text, so parsing rules live here
  and not in pandas' type inference.
- Numbers are parsed leniently: the leading numeric part of a cell is
  used ("45.5%" -> 45.5, "2022.0" -> 2022).
- A row without a region is dropped. Other bad cells do not reject the
  row unless `strict=True` (see `normalize_rows`).
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging
import math
import re
import pandas as pd
from .models import ChildSex, Settlement, SurveyRecord, WealthQuintile

logger = logging.getLogger(__name__)

FIELDS = ("Region", "Year", "EBF_Rate", "Type", "Child_Sex", "Wealth_Index", "Age_Month")
OPTIONAL_FIELDS = ("Education",)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class RecordParseError(ValueError):
    """A numeric field of a row could not be parsed (strict mode only)."""

    def __init__(self, field: str, raw: Any):
        super().__init__(f"Cannot parse {field}={raw!r}")
        self.field = field
        self.raw = raw


def _cell(x) -> str:
    """Return the cell as text; blanks/NaN become ""."""
    if x is None:
        return ""
    if isinstance(x, float) and math.isnan(x):
        return ""
    return str(x)


def _to_int(x) -> Optional[int]:
    """Parse the leading integer of a cell, or None."""
    m = _LEADING_INT.match(_cell(x))
    return int(m.group(1)) if m else None


def _to_float(x) -> float:
    """Parse the leading number of a cell, or NaN."""
    m = _LEADING_FLOAT.match(_cell(x))
    return float(m.group(1)) if m else math.nan


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _optional_col(df: pd.DataFrame, name: str) -> Optional[str]:
    cols = list(df.columns)
    if name in cols:
        return name
    norm_map = {_norm(c): c for c in cols}
    return norm_map.get(_norm(name))


def _col(df: pd.DataFrame, name: str) -> str:
    c = _optional_col(df, name)
    if c is not None:
        return c
    cols = list(df.columns)
    raise KeyError(f"Missing required column {name!r}. Available={cols}")


def normalize_row(row: Mapping[str, Any], *, strict: bool = False) -> Optional[SurveyRecord]:
    """Convert one raw row into a SurveyRecord.

    Returns None when the row has no region. With `strict=True` an
    unparseable year, rate or age raises RecordParseError; otherwise a bad
    year drops the row, the rate becomes NaN and the age None.
    """
    region = _cell(row.get("Region"))
    if not region:
        logger.debug("Dropping row without Region: %r", dict(row))
        return None

    year = _to_int(row.get("Year"))
    if year is None:
        if strict:
            raise RecordParseError("Year", row.get("Year"))
        logger.warning("Dropping row for %s: unparseable Year=%r", region, row.get("Year"))
        return None

    rate = _to_float(row.get("EBF_Rate"))
    if strict and math.isnan(rate):
        raise RecordParseError("EBF_Rate", row.get("EBF_Rate"))

    age = _to_int(row.get("Age_Month"))
    if strict and age is None:
        raise RecordParseError("Age_Month", row.get("Age_Month"))

    return SurveyRecord(
        region=region,
        year=year,
        ebf_rate=rate,
        settlement=Settlement.parse(_cell(row.get("Type"))),
        child_sex=ChildSex.parse(_cell(row.get("Child_Sex"))),
        wealth=WealthQuintile.parse(_cell(row.get("Wealth_Index"))),
        age_month=age,
    )


def normalize_rows(rows: Iterable[Mapping[str, Any]], *, strict: bool = False) -> List[SurveyRecord]:
    """Normalize every row, skipping dropped ones.

    In strict mode rows raising RecordParseError are excluded and logged.
    """
    records: List[SurveyRecord] = []
    seen = 0
    rejected = 0
    for i, row in enumerate(rows):
        seen += 1
        try:
            rec = normalize_row(row, strict=strict)
        except RecordParseError as e:
            rejected += 1
            logger.warning("Excluding row %d: %s", i, e)
            continue
        if rec is not None:
            records.append(rec)
    logger.info("Normalized %d of %d rows (%d excluded as unparseable)", len(records), seen, rejected)
    return records


def _frame_to_rows(df: pd.DataFrame) -> List[Dict[str, str]]:
    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    rename = {_col(df, f): f for f in FIELDS}
    for f in OPTIONAL_FIELDS:
        c = _optional_col(df, f)
        if c is not None:
            rename[c] = f
    df = df.rename(columns=rename)
    return [{k: _cell(v) for k, v in rec.items()} for rec in df.to_dict("records")]


def load_survey_csv(path: str) -> List[Dict[str, str]]:
    """Read a survey CSV into raw rows (all values as text, blank lines skipped)."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    rows = _frame_to_rows(df)
    logger.info("Read %d rows from %s", len(rows), path)
    return rows


def load_survey_xlsx(path: str, sheet_name=0) -> List[Dict[str, str]]:
    """Read the first (or named) sheet of a survey workbook into raw rows."""
    df = pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl", dtype=object)
    df = df.dropna(how="all")
    rows = _frame_to_rows(df)
    logger.info("Read %d rows from %s", len(rows), path)
    return rows
