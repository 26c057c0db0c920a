"""
Tests of ebfstat.geo
"""

from __future__ import annotations

import pytest

from ebfstat.geo import canonical_region_name, feature_name, join_features


@pytest.mark.parametrize(
    "boundary_name, dataset_name",
    (
        ("Ilocos Region", "Region I"),
        ("CALABARZON", "Region IV-A"),
        ("Region IV-B", "MIMAROPA"),
        ("Negros Island Region", "Region VII"),
        ("Bangsamoro Autonomous Region in Muslim Mindanao", "BARMM"),
        ("Somewhere Else", "Somewhere Else"),
    ),
)
def test_canonical_region_name(boundary_name, dataset_name):
    assert canonical_region_name(boundary_name) == dataset_name


def test_feature_name_key_order():
    assert feature_name({"NAME_1": "x", "ADM1_EN": " Ilocos Region "}) == "Ilocos Region"
    assert feature_name({"name": "Caraga"}) == "Caraga"
    assert feature_name({}) is None


def test_join_features(engine):
    geojson = {
        "features": [
            {"properties": {"ADM1_EN": "Ilocos Region"}},
            {"properties": {"NAME_1": " National Capital Region "}},
            {"properties": {"REGION": "Davao Region"}},
            {"properties": {}},
        ]
    }
    features = join_features(geojson, engine.regions)

    ilocos, ncr, davao, blank = (f["properties"] for f in features)
    assert ilocos["value"] == 60.0
    assert ilocos["displayName"] == "Region I"
    assert ilocos["dataContext"].region == "Region I"
    assert ncr["value"] == 22.0
    assert ncr["displayName"] == "NCR"
    assert davao["value"] == 0
    assert davao["displayName"] == "Davao Region"
    assert "dataContext" not in davao
    assert blank["value"] == 0
