import logging
import os
import zipfile
from typing import Optional

from openpyxl.utils.exceptions import InvalidFileException

from compare_config import validate_label, validate_path, validate_tolerance
from compare_errors import IngestionError, IngestionReadError, SourceNotFoundError
from csv_ingest import MAX_FILE_BYTES, MAX_ROWS, read_delimited
from diff_report import DifferenceReporter
from grid_compare import ComparisonResult, common_regions, run_regions
from grid_sources import TableGrid, iter_sheet_pairs, open_workbook

logger = logging.getLogger(__name__)


def _rejected(reporter, message):
    logger.error(message)
    if reporter is not None:
        reporter.error(f"Error: {message}")
    return ComparisonResult()


# -----------------------------
# CSV
# -----------------------------
def compare_csv(file1: str, file2: str, tolerance: float,
                reporter: Optional[DifferenceReporter] = None,
                max_bytes: int = MAX_FILE_BYTES,
                max_rows: int = MAX_ROWS) -> ComparisonResult:
    """
    Compare two delimited files as one region labelled '<name1> vs <name2>'.
    A file that cannot be ingested gives a zero-region result, never a
    partial comparison.
    """
    file1 = validate_path(file1, "file1")
    file2 = validate_path(file2, "file2")
    tolerance = validate_tolerance(tolerance)

    if reporter is not None:
        reporter.info("Comparing CSV files...")

    try:
        rows1 = read_delimited(file1, max_bytes, max_rows)
    except IngestionError as e:
        return _rejected(reporter, f"Cannot read '{file1}' - {e}")
    try:
        rows2 = read_delimited(file2, max_bytes, max_rows)
    except IngestionError as e:
        return _rejected(reporter, f"Cannot read '{file2}' - {e}")

    label = f"{os.path.basename(file1)} vs {os.path.basename(file2)}"
    pairs = [(label, TableGrid(rows1), TableGrid(rows2))]
    return run_regions(pairs, tolerance, reporter)


# -----------------------------
# Excel
# -----------------------------
def _open(path):
    try:
        return open_workbook(path)
    except FileNotFoundError:
        raise SourceNotFoundError(path, f"File not found: {path}") from None
    except (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
        raise IngestionReadError(path, str(e)) from e


def _open_pair(file1, file2, reporter):
    try:
        book1 = _open(file1)
    except IngestionError as e:
        _rejected(reporter, f"Cannot open '{file1}' - {e}")
        return None
    try:
        book2 = _open(file2)
    except IngestionError as e:
        book1.close()
        _rejected(reporter, f"Cannot open '{file2}' - {e}")
        return None
    return book1, book2


def compare_single_sheet(file1: str, file2: str, sheet_name: str, tolerance: float,
                         reporter: Optional[DifferenceReporter] = None) -> ComparisonResult:
    file1 = validate_path(file1, "file1")
    file2 = validate_path(file2, "file2")
    sheet_name = validate_label(sheet_name)
    tolerance = validate_tolerance(tolerance)

    books = _open_pair(file1, file2, reporter)
    if books is None:
        return ComparisonResult()

    with books[0] as book1, books[1] as book2:
        if sheet_name not in book1.sheet_names or sheet_name not in book2.sheet_names:
            return _rejected(reporter, f"Sheet '{sheet_name}' not found in one or both workbooks.")
        return run_regions(iter_sheet_pairs(book1, book2, [sheet_name]),
                           tolerance, reporter)


def compare_all_sheets(file1: str, file2: str, tolerance: float,
                       reporter: Optional[DifferenceReporter] = None) -> ComparisonResult:
    """
    Compare every sheet name present in both workbooks.
    Sheets found in only one workbook are left out, not counted as differences.
    """
    file1 = validate_path(file1, "file1")
    file2 = validate_path(file2, "file2")
    tolerance = validate_tolerance(tolerance)

    books = _open_pair(file1, file2, reporter)
    if books is None:
        return ComparisonResult()

    with books[0] as book1, books[1] as book2:
        names = common_regions(book1.sheet_names, book2.sheet_names)
        return run_regions(iter_sheet_pairs(book1, book2, names),
                           tolerance, reporter)
