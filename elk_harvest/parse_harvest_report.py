#!/usr/bin/env python3
"""
CPW Harvest Report CSV Parser
Parses the CSV export of a Colorado Parks & Wildlife statewide harvest estimate
into per-unit records.

The export is a run of loosely delimited tables, each introduced by a section
title such as:
    2017 Elk Harvest, Hunters and Percent Success for First Rifle Season
followed by the column header
    Unit | Bulls | Cows | Calves | Harvest | Hunters | Success | Rec.Days
and closed by a "Total" row or a blank first cell.

Usage:
    python -m elk_harvest.parse_harvest_report huntData/CO2017.csv -o output/CO2017.json
"""

import re
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from elk_harvest.seasons import INVALID_SEASON, classify_season, is_season_row
from elk_harvest.sources import ReportSourceError, infer_year, open_report_rows

log = logging.getLogger(__name__)

DEFAULT_ANIMAL = "elk"
DEFAULT_YEAR = 2017

HEADER_CELLS = ("unit", "bulls", "cows")
TOTAL_CELL = "total"


# ---------------------------------------------------------------------------
# Number parsing
# ---------------------------------------------------------------------------

# Whole cell must be an optionally signed ASCII integer, no padding
INT_RE = re.compile(r'[+-]?[0-9]+')


def parse_int_checked(s: str, strip_commas: bool = True) -> tuple[int, bool]:
    """Parse an integer cell. Returns (value, ok); failures give (0, False)."""
    if strip_commas:
        s = s.replace(",", "")
    if not INT_RE.fullmatch(s):
        return 0, False
    return int(s), True


def parse_int_or_zero(s: str, strip_commas: bool = True) -> int:
    """Parse an integer, falling back to 0.

    Real reports have stray "N/A", "-" and blank cells; a bad cell costs that
    one value, never the row.
    """
    return parse_int_checked(s, strip_commas)[0]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnitHarvest:
    season: str
    unit: int
    bulls: int = 0
    cows: int = 0
    calves: int = 0
    harvest: int = 0
    hunters: int = 0
    success: int = 0        # percent
    rec_days: int = 0

    def as_json(self) -> dict:
        """Wire form; the unit is the key it is filed under, so it is left out."""
        return {
            'season': self.season,
            'bulls': self.bulls,
            'cows': self.cows,
            'calves': self.calves,
            'harvest': self.harvest,
            'hunters': self.hunters,
            'success': self.success,
            'recdays': self.rec_days,
        }


@dataclass(frozen=True)
class DAUHarvest:
    """Season-level summary for a Data Analysis Unit. Not filled in yet."""
    season: str
    dau: str
    total_hunter_estimate: int = 0
    total_harvest_estimate: int = 0
    total_recreation_days_estimate: int = 0

    def as_json(self) -> dict:
        return {
            'Season': self.season,
            'DAU': self.dau,
            'TotalHunterEstimate': self.total_hunter_estimate,
            'TotalHarvestEstimate': self.total_harvest_estimate,
            'TotalRecreationDaysEstimate': self.total_recreation_days_estimate,
        }


@dataclass(frozen=True)
class HarvestCollection:
    """Everything ingested from one report. Read-only once built."""
    harvests_by_dau: Mapping[str, tuple[DAUHarvest, ...]] = field(
        default_factory=lambda: MappingProxyType({}))
    harvests_by_unit: Mapping[int, tuple[UnitHarvest, ...]] = field(
        default_factory=lambda: MappingProxyType({}))

    def unit_harvests(self, unit: int) -> tuple[UnitHarvest, ...]:
        return self.harvests_by_unit.get(unit, ())

    def units(self) -> list[int]:
        return sorted(self.harvests_by_unit)

    def record_count(self) -> int:
        return sum(len(recs) for recs in self.harvests_by_unit.values())

    def as_json(self) -> dict:
        return {
            'HarvestsByDAU': {
                dau: [r.as_json() for r in recs]
                for dau, recs in self.harvests_by_dau.items()
            },
            'HarvestsByUnit': {
                str(unit): [r.as_json() for r in recs]
                for unit, recs in self.harvests_by_unit.items()
            },
        }


@dataclass
class IngestStats:
    rows_read: int = 0
    tables_found: int = 0
    records: int = 0
    invalid_sections: int = 0
    dropped_rows: int = 0       # rows skipped inside an unrecognised section
    coerced_fields: int = 0     # numeric cells that fell back to 0


# ---------------------------------------------------------------------------
# Table state machine
# ---------------------------------------------------------------------------

def _cell(row: Sequence[str], idx: int) -> str:
    return row[idx] if idx < len(row) else ""


def is_table_end(row: Sequence[str]) -> bool:
    first = _cell(row, 0)
    return first == "" or first.lower() == TOTAL_CELL


def is_table_header(row: Sequence[str]) -> bool:
    return tuple(_cell(row, i).lower() for i in range(len(HEADER_CELLS))) == HEADER_CELLS


class HarvestExtractor:
    """Walks report rows one at a time, collecting per-unit harvest records.

    Two pieces of state carry across rows: the current season and whether we
    are inside a data table. Feed rows in document order, then call build().
    """

    def __init__(self, animal: str = DEFAULT_ANIMAL, year: int = DEFAULT_YEAR):
        self.animal = animal
        self.year = year
        self.current_season = ""
        self.on_data_entries = False
        self.stats = IngestStats()
        self._by_unit: dict[int, list[UnitHarvest]] = {}

    def feed(self, row: Sequence[str]) -> Optional[UnitHarvest]:
        """Consume one row. Returns the record it produced, if any."""
        self.stats.rows_read += 1

        # Checked before the season so a trailing "Total" can't read as a title
        if is_table_end(row):
            self.on_data_entries = False

        self.current_season = classify_season(row, self.current_season, self.animal, self.year)
        if self.current_season == INVALID_SEASON:
            if is_season_row(row, self.animal, self.year):
                self.stats.invalid_sections += 1
                log.warning(f"  Unrecognised season section, skipping: '{_cell(row, 0)[:80]}'")
            else:
                self.stats.dropped_rows += 1
            return None

        if is_table_header(row):
            self.on_data_entries = True
            self.stats.tables_found += 1
            log.debug(f"  Table start [{self.current_season}] at row {self.stats.rows_read}")
            return None

        if not self.on_data_entries:
            return None

        return self._add_record(row)

    def _parse(self, row: Sequence[str], idx: int, strip_commas: bool = True) -> int:
        value, ok = parse_int_checked(_cell(row, idx), strip_commas)
        if not ok:
            self.stats.coerced_fields += 1
            log.debug(f"  Non-numeric cell {idx} in row {self.stats.rows_read}: '{_cell(row, idx)}'")
        return value

    def _add_record(self, row: Sequence[str]) -> UnitHarvest:
        unit = self._parse(row, 0, strip_commas=False)
        rec = UnitHarvest(
            season=self.current_season,
            unit=unit,
            bulls=self._parse(row, 1),
            cows=self._parse(row, 2),
            calves=self._parse(row, 3),
            harvest=self._parse(row, 4),
            hunters=self._parse(row, 5),
            # Percent success and rec days are never comma-grouped in the source
            success=self._parse(row, 6, strip_commas=False),
            rec_days=self._parse(row, 7, strip_commas=False),
        )
        self._by_unit.setdefault(unit, []).append(rec)
        self.stats.records += 1
        return rec

    def build(self) -> HarvestCollection:
        return HarvestCollection(
            harvests_by_dau=MappingProxyType({}),
            harvests_by_unit=MappingProxyType(
                {unit: tuple(recs) for unit, recs in self._by_unit.items()}),
        )


# ---------------------------------------------------------------------------
# Main parsing functions
# ---------------------------------------------------------------------------

def parse_rows(rows: Iterable[Sequence[str]], animal: str = DEFAULT_ANIMAL,
               year: int = DEFAULT_YEAR) -> tuple[HarvestCollection, IngestStats]:
    """Run every row through a fresh extractor and return what it collected."""
    extractor = HarvestExtractor(animal, year)
    for row in rows:
        extractor.feed(row)

    collection = extractor.build()
    stats = extractor.stats
    log.info(f"  Rows read: {stats.rows_read}, tables: {stats.tables_found}")
    log.info(f"  Records: {stats.records} across {len(collection.harvests_by_unit)} units")
    if stats.invalid_sections:
        log.warning(f"  Skipped {stats.invalid_sections} unrecognised section(s), "
                    f"{stats.dropped_rows} row(s) dropped")
    if stats.coerced_fields:
        log.info(f"  Non-numeric cells read as 0: {stats.coerced_fields}")
    return collection, stats


def parse_harvest_report(path, animal: str = DEFAULT_ANIMAL,
                         year: Optional[int] = None) -> tuple[HarvestCollection, IngestStats]:
    """Parse a harvest report file (CSV, or PDF via pdfplumber).

    The year defaults to the one in the file name (CO2017.csv -> 2017).
    Raises ReportSourceError if the file can't be opened.
    """
    log.info(f"Parsing: {path}")
    if year is None:
        year = infer_year(path) or DEFAULT_YEAR
    log.info(f"  Year: {year}, animal: {animal}")

    rows = open_report_rows(path)
    return parse_rows(rows, animal, year)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def export_to_json(collection: HarvestCollection, output_path: str, stats: Optional[IngestStats] = None):
    """Export parsed data to JSON."""
    data = collection.as_json()
    if stats is not None:
        data['stats'] = asdict(stats)
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(data, f, indent=2)
    log.info(f"  Wrote: {output_path}")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Parse a CPW harvest report CSV into per-unit JSON.",
        epilog="Example: python -m elk_harvest.parse_harvest_report huntData/CO2017.csv -o output/CO2017.json"
    )
    parser.add_argument("report", help="Harvest report (.csv, or .pdf)")
    parser.add_argument("-o", "--output", default=None,
                        help="Output JSON path (default: output/<report name>.json)")
    parser.add_argument("--animal", default=DEFAULT_ANIMAL, help="Animal named in section titles (default: elk)")
    parser.add_argument("--year", type=int, default=None, help="Report year (default: taken from the file name)")
    parser.add_argument("--debug", action="store_true", help="Log every table start and coerced cell")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(levelname)s: %(message)s")

    try:
        collection, stats = parse_harvest_report(args.report, args.animal, args.year)
    except ReportSourceError as e:
        log.error(f"Failed to parse {args.report}: {e}")
        return 1

    output = args.output or str(Path("output") / f"{Path(args.report).stem}.json")
    export_to_json(collection, output, stats)

    print(f"\nDone. {stats.records} record(s) for {len(collection.harvests_by_unit)} unit(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
