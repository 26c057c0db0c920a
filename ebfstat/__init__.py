"""
ebfstat package
===============

Aggregates exclusive breastfeeding (EBF) survey records into per-region,
per-year statistics and a national average for dashboards.

- The CLI entry point is in `ebfstat/cli.py`.
- Region/year aggregation is in `ebfstat/aggregate.py`, the national
  average in `ebfstat/national.py`.
- The engine (selection, rankings, heatmap, exports) is in `ebfstat/engine.py`.
- Dataset loading is in `ebfstat/loader.py`.
- Matching map boundary names to dataset regions is in `ebfstat/geo.py`.
"""

__version__ = '0.1.0'
