"""
ebfstat Command Line Interface (CLI)
====================================

Interactive terminal program, run like:

    python -m ebfstat.cli --csv "path/to/ebf_data.csv"

The dataset is loaded and aggregated once. Commands then change the
selection (year, region) and print views of the aggregates; the dataset
file itself is never modified.
"""

from __future__ import annotations
import argparse, math, os, shlex
from .loader import load_survey_csv, load_survey_xlsx
from .logging_config import create_logger
from .engine import EBFEngine, map_tier, rate_tier

HELP = """
Commands:
  help
  stats
  years
  regions [prefix]

  year <y>                          (example: year 2022)
  select "<Region>"                 (example: select "Region IV-A")
  clear                             (back to the national view)

  show ["<Region>"]                 yearly history of a region (default: current)
  national                          yearly history of the national average
  kpi                               national and selected-region KPIs
  rank [year] [n]                   leaderboard (regions with rate > 0)
  heatmap                           region x year table

  export rankings ["<path.csv>"]
  export raw ["<path.csv>"]
  export json "<path.json>"
  report "<path.docx>"
  quit
"""

# commands that do not change state are kept out of the command log
_READ_ONLY = ("help", "show", "stats", "years", "regions", "national", "kpi", "rank", "heatmap", "quit")


def _citation(engine):
    from .report import DatasetCitation
    p = engine.dataset_path
    return DatasetCitation(file_name=os.path.basename(p) if p else None)


def main(argv=None):
    """Entry point for the ebfstat CLI.

    1) Load dataset
    2) Aggregate regions
    3) Start an interactive REPL
    """
    ap = argparse.ArgumentParser(description="EBF survey aggregation engine")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--csv", help="Path to survey CSV")
    src.add_argument("--xlsx", help="Path to survey Excel workbook")
    ap.add_argument("--strict", action="store_true",
                    help="Exclude rows with unparseable numbers instead of keeping NaN")
    ap.add_argument("--target", type=float, default=70.0, help="EBF target rate (percent)")
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--log-file", default=None)
    args = ap.parse_args(argv)

    create_logger("ebfstat", args.log_level, log_file=args.log_file)

    path = args.csv or args.xlsx
    print("Loading dataset...")
    rows = load_survey_csv(path) if args.csv else load_survey_xlsx(path)
    engine = EBFEngine.from_rows(rows, strict=args.strict, target=args.target, dataset_path=path)

    print(f"Loaded {len(rows)} rows into {len(engine.regions)} regions. Type 'help' for commands.")
    while True:
        try:
            line = input("ebf> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        if stripped.split()[0].lower() not in _READ_ONLY:
            engine.command_log.append(stripped)
        try:
            handle(engine, stripped)
        except Exception as e:
            print(f"Error: {e}")


def handle(engine: EBFEngine, line: str) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        years = engine.years()
        print(f"Regions: {len(engine.regions)} | Years: {len(years)} | Active year: {engine.state.selected_year}")
        print(f"Selected region: {engine.state.selected_region or '(national)'}")
        return

    if cmd == "years":
        print(", ".join(str(y) for y in engine.years()))
        return

    if cmd == "regions":
        prefix = parts[1].lower() if len(parts) >= 2 else ""
        for r in engine.regions:
            if r.region.lower().startswith(prefix):
                print(f"{r.region:<40} {r.value:>6}%  [{map_tier(r.value)}]")
        return

    if cmd == "year":
        y = int(parts[1])
        engine.set_active_year(y)
        print(f"Active year={y}.")
        _print_kpis(engine)
        return

    if cmd == "select":
        r = engine.select_region(parts[1])
        print(f"Selected {r.label}.")
        _print_kpis(engine)
        return

    if cmd == "clear":
        engine.clear_selection()
        print("Selection cleared (national view).")
        return

    if cmd == "show":
        p = engine.find_region(parts[1]) if len(parts) >= 2 else engine.current()
        _print_history(p)
        return

    if cmd == "national":
        _print_history(engine.national())
        return

    if cmd == "kpi":
        _print_kpis(engine)
        return

    if cmd == "rank":
        year = int(parts[1]) if len(parts) >= 2 else None
        n = int(parts[2]) if len(parts) >= 3 else None
        rows = engine.rankings(year)
        for i, r in enumerate(rows[:n], start=1):
            print(f"{i:>3}. {r.region:<40} {r.rate:>6}%  [{rate_tier(r.rate)}]")
        if not rows:
            print("No region has data for that year.")
        return

    if cmd == "heatmap":
        print(engine.heatmap().to_string(na_rep="--"))
        return

    if cmd == "export":
        if len(parts) < 2:
            print('Usage: export rankings|raw ["out.csv"]  OR  export json "out.json"')
            return
        fmt = parts[1].lower()
        out_path = parts[2] if len(parts) >= 3 else None
        if fmt == "rankings":
            print(f"Exported rankings to {engine.export_rankings_csv(out_path)}")
            return
        if fmt == "raw":
            print(f"Exported raw data to {engine.export_raw_csv(out_path or 'ebf_full_raw_data.csv')}")
            return
        if fmt == "json":
            if not out_path:
                print('Usage: export json "out.json"')
                return
            print(f"Exported JSON to {engine.export_json(out_path)}")
            return
        print("Unknown export format. Use: rankings, raw or json")
        return

    if cmd == "report":
        from .report import generate_docx_report, ReportConfig
        cfg = ReportConfig(citation=_citation(engine), command_log=engine.command_log)
        generate_docx_report(engine, parts[1], config=cfg)
        print(f"Report written to {parts[1]}")
        return

    print("Unknown command. Type 'help'.")


def _print_history(p) -> None:
    print(f"{p.label} (value={p.value})")
    for h in p.history:
        wealth = " ".join(f"{q.value}={n}" for q, n in h.wealth_dist.items())
        ages = " ".join(f"{i}m={v}" for i, v in enumerate(h.age_trend))
        print(f"  {h.year}: {h.value}% | urban={h.urban_avg} rural={h.rural_avg} "
              f"male={h.male_avg} female={h.female_avg}")
        print(f"        wealth: {wealth}")
        print(f"        age:    {ages}")


def _print_kpis(engine: EBFEngine) -> None:
    kpi = engine.national_kpi()
    if kpi is None or math.isnan(kpi.value):
        print("National: --%")
    else:
        sign = "+" if kpi.diff >= 0 else ""
        print(f"National {kpi.year}: {kpi.value:.1f}% ({sign}{kpi.diff}% vs target)")
    rk = engine.region_kpi()
    if rk is not None and math.isnan(rk.value):
        print(f"{rk.label}: --%")
    elif rk is not None:
        status = "Target Met!" if rk.target_met else f"{rk.gap}% away"
        print(f"{rk.label}: {rk.value}% ({status})")


if __name__ == "__main__":
    main()
