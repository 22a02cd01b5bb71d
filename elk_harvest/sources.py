"""
Row sources for harvest reports.

CPW publishes the statewide harvest estimates as PDFs; the CSV exports of those
PDFs are what the parser normally reads. Both end up as a plain stream of rows
(lists of strings) so the table parser does not care where they came from.
"""

import csv
import io
import re
import logging
from pathlib import Path
from typing import IO, Iterator, Optional, Union

import pdfplumber
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

log = logging.getLogger(__name__)

Row = list[str]

YEAR_RE = re.compile(r'(?<!\d)((?:19|20)\d{2})(?!\d)')

# Section title lines on PDF data pages, e.g. "2017 Elk Harvest, Hunters and ..."
PDF_TITLE_RE = re.compile(r'^(?:19|20)\d{2}\s+\S+\s+Harvest\b', re.IGNORECASE)


class ReportSourceError(Exception):
    """The report could not be opened or read at all."""


def infer_year(path: Union[str, Path]) -> Optional[int]:
    """Pull the report year out of a file name like 'CO2017.csv'."""
    m = YEAR_RE.search(Path(path).name)
    if m:
        return int(m.group(1))
    return None


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def read_csv_rows(stream: IO) -> Iterator[Row]:
    """Yield rows from a byte or text stream holding CSV."""
    if isinstance(stream, io.TextIOBase):
        text = stream
    else:
        # Excel exports often carry a BOM, and stray cp1252 bytes
        text = io.TextIOWrapper(stream, encoding="utf-8-sig", errors="replace", newline="")
    yield from csv.reader(text)


def _csv_file_rows(fh: IO) -> Iterator[Row]:
    with fh:
        yield from read_csv_rows(fh)


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

def _clean_cell(cell: Optional[str]) -> str:
    if cell is None:
        return ""
    return " ".join(cell.split())


def _pdf_rows(pdf) -> Iterator[Row]:
    with pdf:
        for page in pdf.pages:
            text = page.extract_text() or ""
            for line in text.split('\n'):
                line = line.strip()
                if PDF_TITLE_RE.match(line):
                    # Pad to the width the season classifier expects
                    yield [line, "", ""]

            for table in page.extract_tables():
                for raw_row in table:
                    yield [_clean_cell(c) for c in raw_row]
                # Blank first cell closes the table
                yield [""]


def read_pdf_rows(path: Union[str, Path]) -> Iterator[Row]:
    """Yield section titles and table rows from a CPW harvest PDF."""
    try:
        pdf = pdfplumber.open(path)
    except (OSError, PDFSyntaxError, PdfminerException) as e:
        raise ReportSourceError(f"Cannot open PDF report {path}: {e}") from e
    return _pdf_rows(pdf)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def open_report_rows(path: Union[str, Path]) -> Iterator[Row]:
    """Open a report file and return its rows.

    The file is opened eagerly so a missing or unreadable report fails here,
    before any parsing starts.
    """
    path = Path(path)
    log.info(f"Opening: {path}")

    if path.suffix.lower() == ".pdf":
        return read_pdf_rows(path)

    try:
        fh = path.open("rb")
    except OSError as e:
        raise ReportSourceError(f"Cannot open report {path}: {e}") from e
    return _csv_file_rows(fh)
