"""
Season classification for CPW harvest report rows.

Section titles in the CSV export look like:
    2017 Elk Harvest, Hunters and Percent Success for All Muzzleloader Seasons

Only rows whose first cell starts with "<year> <animal> harvest" can change the
current season. Cells 0 and 2 of such a row are searched for the labels below.
"""

import logging
from typing import Sequence

log = logging.getLogger(__name__)

INVALID_SEASON = "invalid"

# Checked top to bottom, first hit wins. "all rifle" has to be tried before the
# individual rifle seasons and "late" before anything that could contain it.
SEASON_TAXONOMY: tuple[tuple[str, str], ...] = (
    ("all manners of take", "all manners of take"),
    ("all rifle", "all rifle"),
    ("all ranching for wildlife", "all ranching for wildlife"),
    ("early high country", "early high country"),
    ("late", "late"),
    ("private land only", "private land only"),
    ("first rifle", "first rifle"),
    ("second rifle", "second rifle"),
    ("third rifle", "third rifle"),
    ("fourth rifle", "fourth rifle"),
    ("archery", "archery"),
    ("muzzleloader", "muzzleloader"),
)

SEASON_TAGS = tuple(tag for _, tag in SEASON_TAXONOMY)

# Cells that carry the season wording on a section title row
SEASON_CELLS = (0, 2)


def season_prefix(animal: str, year: int) -> str:
    return f"{year} {animal} harvest".lower()


def is_season_row(row: Sequence[str], animal: str, year: int) -> bool:
    """True if the row is a section title for this animal/year."""
    if len(row) < 3:
        return False
    return row[0].lower().startswith(season_prefix(animal, year))


def match_season(text: str) -> str:
    """Return the first taxonomy tag contained in text, or INVALID_SEASON."""
    lowered = text.lower()
    for needle, tag in SEASON_TAXONOMY:
        if needle in lowered:
            return tag
    return INVALID_SEASON


def classify_season(row: Sequence[str], current_season: str, animal: str, year: int) -> str:
    """Work out which season a row belongs to.

    Rows that are not section titles pass `current_season` straight through.
    A section title that names no known season yields INVALID_SEASON, which
    tells the caller to ignore the section.
    """
    if not is_season_row(row, animal, year):
        return current_season

    for idx in SEASON_CELLS:
        log.debug(f"  Season cell {idx}: '{row[idx]}'")
        tag = match_season(row[idx])
        if tag != INVALID_SEASON:
            return tag

    return INVALID_SEASON
