from __future__ import annotations

"""
ebfstat report generator
------------------------
This module writes a DOCX report from an `EBFEngine`.

Design goals:
- Keep ebfstat usable without the report dependencies (lazy imports).
- Report only on finished aggregates: region profiles, the national
  profile, rankings and the heatmap. Raw rows are never re-read here.
- Follow the engine's current selection: the active year decides the
  leaderboard and KPI, the selected region (or the nation) decides the
  wealth and age charts.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging
import math
import os
import tempfile

from .engine import EBFEngine, rate_tier, trend_series
from .national import all_years

logger = logging.getLogger(__name__)

TIER_COLORS = {"high": "#27ae60", "medium": "#f39c12", "low": "#c0392b"}


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    survey_name: str = "Exclusive Breastfeeding (EBF) survey extract"
    institutional_author: Optional[str] = None
    access_date_iso: Optional[str] = None
    file_name: Optional[str] = None


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "EBF Regional Report"
    subtitle: str = "Exclusive breastfeeding rates by region and year"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many regions to show in the leaderboard chart
    top_n: int = 17

    command_log: Optional[List[str]] = None


def _fmt(v: Optional[float]) -> str:
    if v is None or (isinstance(v, float) and math.isnan(v)):
        return "--"
    return f"{v:.1f}%"


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    engine: EBFEngine,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    year: Optional[int] = None,
) -> str:
    """Generate a DOCX report + charts for the engine's current selection."""
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.shared import Inches, Pt
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not engine.regions:
        raise ValueError("No regions to report on (dataset is empty).")

    year = year if year is not None else engine.state.selected_year
    national = engine.national()
    focus = engine.current()
    focus_summary = focus.summary_for(year)
    rankings = engine.rankings(year)
    years = all_years(engine.regions)

    # -----------------------------
    # 1) Charts
    # -----------------------------
    tmpdir = tempfile.mkdtemp(prefix="ebfstat_report_")
    # Each chart is: (title, file_path)
    chart_paths: List[Tuple[str, str]] = []

    def _save(filename: str) -> str:
        path = os.path.join(tmpdir, filename)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close()
        return path

    # National trend, with the focused region on top when one is selected
    plt.figure()
    plt.plot(years, trend_series(national, years), marker="o", label=national.label)
    if focus.region != national.region:
        ys = [np.nan if v is None else v for v in trend_series(focus, years)]
        plt.plot(years, ys, marker="o", label=focus.label)
    plt.axhline(engine.target, linestyle="--", color="grey", label=f"Target ({engine.target:g}%)")
    plt.xticks(years)
    plt.ylabel("EBF %")
    plt.title("Historical trend")
    plt.legend()
    chart_paths.append(("Historical trend", _save("trend.png")))

    # Leaderboard coloured by tier
    top = rankings[:config.top_n]
    if top:
        plt.figure(figsize=(7, max(3, 0.35 * len(top))))
        labels = [r.region for r in top][::-1]
        values = [r.rate for r in top][::-1]
        plt.barh(labels, values, color=[TIER_COLORS[rate_tier(v)] for v in values])
        plt.xlim(0, 100)
        plt.xlabel("EBF Rate (%)")
        plt.title(f"Regional leaderboard ({year})")
        chart_paths.append((f"Regional leaderboard ({year})", _save("leaderboard.png")))

    if focus_summary is not None:
        dist = {q.value: n for q, n in focus_summary.wealth_dist.items()}
        if sum(dist.values()) > 0:
            plt.figure()
            plt.bar(list(dist.keys()), list(dist.values()))
            plt.ylabel("Records")
            plt.title(f"Wealth distribution ({focus.label}, {year})")
            chart_paths.append(("Wealth distribution", _save("wealth.png")))

        plt.figure()
        plt.scatter(np.arange(len(focus_summary.age_trend)), focus_summary.age_trend)
        plt.xlabel("Age (months)")
        plt.ylabel("EBF %")
        plt.title(f"EBF adherence by age ({focus.label}, {year})")
        chart_paths.append(("EBF adherence by age", _save("age_trend.png")))

    # -----------------------------
    # 2) Build DOCX report
    # -----------------------------
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    cit = config.citation
    _kv("Dataset", cit.survey_name)
    if cit.file_name:
        _kv("Data file", cit.file_name)
    if cit.institutional_author:
        _kv("Source", cit.institutional_author + (f" (accessed {cit.access_date_iso})" if cit.access_date_iso else ""))
    _kv("Regions", str(len(engine.regions)))
    if years:
        _kv("Survey years", f"{years[0]} to {years[-1]}")
    _kv("Selected year", str(year))
    _kv("Focus", focus.label)

    doc.add_heading("Key figures", level=1)
    kpi = engine.national_kpi(year)
    if kpi is None:
        doc.add_paragraph(f"No national figure for {year}.")
    else:
        direction = "above" if kpi.diff >= 0 else "below"
        doc.add_paragraph(
            f"National average EBF rate in {year}: {_fmt(kpi.value)} "
            f"({abs(kpi.diff):.1f} points {direction} the {engine.target:g}% target)."
        )
    rk = engine.region_kpi()
    if rk is not None:
        status = "target met" if rk.target_met else f"{rk.gap:.1f}% away from target"
        doc.add_paragraph(f"{rk.label}: {_fmt(rk.value)} ({status}).")

    doc.add_heading("Visualizations", level=1)
    for title, path in chart_paths:
        doc.add_paragraph(title)
        doc.add_picture(path, width=Inches(6.0))

    doc.add_heading(f"Rankings ({year})", level=1)
    if rankings:
        t = doc.add_table(rows=1, cols=4)
        h = t.rows[0].cells
        h[0].text = "#"
        h[1].text = "Region"
        h[2].text = "Rate"
        h[3].text = "Tier"
        for i, row in enumerate(rankings, start=1):
            c = t.add_row().cells
            c[0].text = str(i)
            c[1].text = row.region
            c[2].text = _fmt(row.rate)
            c[3].text = rate_tier(row.rate)
    else:
        doc.add_paragraph("No region has data for this year.")

    doc.add_heading("Region x year heatmap", level=1)
    hm = engine.heatmap()
    t2 = doc.add_table(rows=1, cols=len(hm.columns) + 1)
    t2.rows[0].cells[0].text = "Region"
    for j, y in enumerate(hm.columns, start=1):
        t2.rows[0].cells[j].text = str(y)
    for region, values in hm.iterrows():
        c = t2.add_row().cells
        c[0].text = str(region)
        for j, v in enumerate(values, start=1):
            c[j].text = _fmt(None if math.isnan(v) else float(v))

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__
    from datetime import datetime as _dt
    doc.add_paragraph(f"ebfstat version: {__version__}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
    doc.add_paragraph(
        "National figures average the regional figures of each year "
        "(each region with data counts once), not the individual records."
    )
    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    logger.info("Report written to %s (%d charts)", out_path, len(chart_paths))
    return out_path
