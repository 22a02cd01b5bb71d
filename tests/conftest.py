from pathlib import Path

import pytest

from elk_harvest.parse_harvest_report import parse_rows


HEADER = ["Unit", "Bulls", "Cows", "Calves", "Harvest", "Hunters", "Success", "RecDays"]

SAMPLE_CSV = """\
"2017 Elk Harvest, Hunters and Percent Success for Archery Seasons",,Archery,,,,,
Unit,Bulls,Cows,Calves,Harvest,Hunters,Success,RecDays
12,"1,034",502,88,"1,624","3,200",51,4
Total,"1,034",502,88,"1,624","3,200",51,4
,,,,,,,
2017 Elk Harvest for First Rifle Season,,first rifle season,,,,,
Unit,Bulls,Cows,Calves,Harvest,Hunters,Success,RecDays
12,10,5,1,16,100,16,300
201,N/A,3,0,3,20,15,80
Total,10,8,1,19,120,16,380
2017 Elk Harvest for Bosque del Oso,,Bosque,,,,,
Unit,Bulls,Cows,Calves,Harvest,Hunters,Success,RecDays
851,4,11,0,15,75,20,245
Total,4,11,0,15,75,20,245
"""


@pytest.fixture()
def sample_csv_path(tmp_path: Path) -> Path:
    path = tmp_path / "CO2017.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture()
def archery_rows():
    return [
        ["2017 Elk Harvest, Hunters and Percent Success for Archery Seasons", "", "Archery"],
        HEADER,
        ["12", "1,034", "502", "88", "1,624", "3,200", "51", "4"],
    ]


@pytest.fixture()
def archery_collection(archery_rows):
    collection, _ = parse_rows(archery_rows, "elk", 2017)
    return collection
