"""
Map join (boundary names -> dataset regions)
============================================

Boundary files name regions differently from the survey ("Ilocos Region"
vs "Region I"). `REGION_ALIASES` maps the boundary spelling to the
dataset's canonical name so each map feature can be matched to a
`RegionProfile`.
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Sequence
from .models import RegionProfile

REGION_ALIASES: Dict[str, str] = {
    "National Capital Region": "NCR",
    "Metropolitan Manila": "NCR",
    "NCR": "NCR",
    "Cordillera Administrative Region": "CAR",
    "CAR": "CAR",
    "Ilocos Region": "Region I",
    "Region I": "Region I",
    "Cagayan Valley": "Region II",
    "Region II": "Region II",
    "Central Luzon": "Region III",
    "Region III": "Region III",
    "CALABARZON": "Region IV-A",
    "Region IV-A": "Region IV-A",
    "MIMAROPA": "MIMAROPA",
    "Mimaropa": "MIMAROPA",
    "Region IV-B": "MIMAROPA",
    "Bicol Region": "Region V",
    "Region V": "Region V",
    "Western Visayas": "Region VI",
    "Region VI": "Region VI",
    "Central Visayas": "Region VII",
    "Region VII": "Region VII",
    "Negros Island Region": "Region VII",
    "Eastern Visayas": "Region VIII",
    "Region VIII": "Region VIII",
    "Zamboanga Peninsula": "Region IX",
    "Region IX": "Region IX",
    "Northern Mindanao": "Region X",
    "Region X": "Region X",
    "Davao Region": "Region XI",
    "Region XI": "Region XI",
    "SOCCSKSARGEN": "Region XII",
    "Soccsksargen": "Region XII",
    "Region XII": "Region XII",
    "Caraga": "Caraga",
    "Region XIII": "Caraga",
    "Autonomous Region in Muslim Mindanao": "BARMM",
    "Bangsamoro Autonomous Region in Muslim Mindanao": "BARMM",
    "BARMM": "BARMM",
}

# property keys tried in order when reading a feature's name
NAME_KEYS = ("ADM1_EN", "REGION", "name", "NAME_1")


def canonical_region_name(name: str) -> str:
    """Dataset name for a boundary name; unknown names pass through."""
    return REGION_ALIASES.get(name, name)


def feature_name(props: Mapping[str, Any]) -> Optional[str]:
    for k in NAME_KEYS:
        if props.get(k):
            return str(props[k]).strip()
    return None


def join_features(geojson: Dict[str, Any], regions: Sequence[RegionProfile]) -> List[Dict[str, Any]]:
    """Attach profile data to each GeoJSON feature's properties.

    Matched features get `value`, `displayName` (canonical name) and
    `dataContext` (the profile). Unmatched ones get value 0 and keep their
    boundary name. The features are updated in place and returned.
    """
    by_name = {r.region: r for r in regions}
    features = geojson.get("features", [])
    for feature in features:
        props = feature.setdefault("properties", {})
        map_name = feature_name(props)
        csv_name = canonical_region_name(map_name) if map_name else None
        match = by_name.get(csv_name) if csv_name else None
        if match is not None:
            props["dataContext"] = match
            props["value"] = match.value
            props["displayName"] = csv_name
        else:
            props["value"] = 0
            props["displayName"] = map_name
    return features
