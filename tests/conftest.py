"""Shared fixtures for ebfstat tests."""

from typing import Dict, List

import pytest

from ebfstat.aggregate import build_region_profiles
from ebfstat.engine import EBFEngine


def make_row(region="A", year="2022", rate="50", type_="Urban", sex="Male",
             wealth="Middle", age="2", **extra) -> Dict[str, str]:
    row = {
        "Region": region,
        "Year": year,
        "EBF_Rate": rate,
        "Type": type_,
        "Child_Sex": sex,
        "Wealth_Index": wealth,
        "Age_Month": age,
    }
    row.update(extra)
    return row


@pytest.fixture
def row():
    """Factory for raw survey rows."""
    return make_row


@pytest.fixture
def scenario_rows() -> List[Dict[str, str]]:
    """Region A: 40 (Urban) and 60 (Rural) in 2022; Region B: 80 (Urban)."""
    return [
        make_row("A", "2022", "40", "Urban", "Male", "Poorest", "0"),
        make_row("A", "2022", "60", "Rural", "Female", "Richest", "1"),
        make_row("B", "2022", "80", "Urban", "Male", "Middle", "0"),
    ]


@pytest.fixture
def scenario_profiles(scenario_rows):
    return build_region_profiles(scenario_rows)


@pytest.fixture
def multi_year_rows() -> List[Dict[str, str]]:
    return [
        make_row("Region I", "2021", "30", age="0"),
        make_row("Region I", "2022", "55", age="1"),
        make_row("Region I", "2022", "65", type_="Rural", sex="Female", age="1"),
        make_row("NCR", "2022", "20", age="3"),
        make_row("NCR", "2022", "24", age="3"),
        make_row("CAR", "2021", "45", wealth="Poorer", age="5"),
    ]


@pytest.fixture
def engine(multi_year_rows) -> EBFEngine:
    return EBFEngine.from_rows(multi_year_rows, dataset_path="ebf_data.csv")


@pytest.fixture
def survey_csv(tmp_path):
    path = tmp_path / "ebf_data.csv"
    path.write_text(
        "Region,Year,EBF_Rate,Type,Education,Child_Sex,Wealth_Index,Age_Month\n"
        "Region I,2022,40,Urban,Primary,Male,Poorest,0\n"
        "\n"
        "Region I,2022,60,Rural,Secondary,Female,Richer,1\n"
        ",2022,99,Urban,None,Male,Middle,2\n"
        "NCR,2021,35.5%,Urban,Higher,Female,Middle,4\n",
        encoding="utf-8",
    )
    return path
