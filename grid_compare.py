from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional, Protocol, Tuple

from cell_compare import Outcome, classify_cell, compare_cells
from compare_config import validate_label, validate_tolerance
from diff_report import DiffRecord, DifferenceReporter


# -----------------------------
# Grid model
# -----------------------------
@dataclass(frozen=True)
class CellRange:
    """Inclusive, 1-based rectangle [min_row..max_row] x [min_col..max_col]."""

    min_row: int
    max_row: int
    min_col: int
    max_col: int

    @property
    def cell_count(self) -> int:
        return (self.max_row - self.min_row + 1) * (self.max_col - self.min_col + 1)

    def union(self, other: "CellRange") -> "CellRange":
        return CellRange(
            min(self.min_row, other.min_row),
            max(self.max_row, other.max_row),
            min(self.min_col, other.min_col),
            max(self.max_col, other.max_col),
        )


class Grid(Protocol):
    def used_range(self) -> Optional[CellRange]: ...

    def cell_at(self, row: int, col: int): ...


ORIGIN = CellRange(1, 1, 1, 1)


def resolve_scan_range(used1: Optional[CellRange],
                       used2: Optional[CellRange]) -> Optional[CellRange]:
    """
    Rectangle to scan for two sparse grids:
    - neither has data -> None
    - one has data     -> that grid's bounding box
    - both have data   -> the union of both boxes

    The result always reaches back to R1C1, so a single cell at R50C50
    scans 50 x 50 cells and row/column counts line up with sheet addresses.
    """
    if used1 is None and used2 is None:
        return None
    if used1 is None:
        box = used2
    elif used2 is None:
        box = used1
    else:
        box = used1.union(used2)
    return box.union(ORIGIN)


# -----------------------------
# Result accumulator
# -----------------------------
@dataclass
class ComparisonResult:
    cells_compared: int = 0
    numeric_mismatches: int = 0
    text_mismatches: int = 0
    regions_compared: int = 0

    @property
    def total_mismatches(self) -> int:
        return self.numeric_mismatches + self.text_mismatches

    def fold(self, region: "ComparisonResult"):
        """Add one region's counts; counts the region once whatever it found."""
        self.cells_compared += region.cells_compared
        self.numeric_mismatches += region.numeric_mismatches
        self.text_mismatches += region.text_mismatches
        self.regions_compared += 1

    def to_dict(self) -> dict:
        d = asdict(self)
        d["total_mismatches"] = self.total_mismatches
        return d


# -----------------------------
# Comparison loop
# -----------------------------
def _scan_region(grid1, grid2, label, tolerance, reporter):
    result = ComparisonResult(regions_compared=1)

    used1 = grid1.used_range()
    used2 = grid2.used_range()
    if used1 is None and used2 is None:
        return result

    scan = resolve_scan_range(used1, used2)

    for row in range(scan.min_row, scan.max_row + 1):
        for col in range(scan.min_col, scan.max_col + 1):
            result.cells_compared += 1

            outcome = compare_cells(
                classify_cell(grid1.cell_at(row, col)),
                classify_cell(grid2.cell_at(row, col)),
                tolerance,
            )
            if outcome.is_match:
                continue

            if outcome.kind is Outcome.NUMERIC_MISMATCH:
                result.numeric_mismatches += 1
            else:
                result.text_mismatches += 1

            if reporter is not None:
                reporter.add(DiffRecord(label, row, col, outcome))

    return result


def compare_region(grid1: Grid, grid2: Grid, label: str, tolerance: float,
                   reporter: Optional[DifferenceReporter] = None) -> ComparisonResult:
    """
    Compare one region cell by cell over the resolved scan range, row-major.
    Absent cells read as Empty. regions_compared is 1 for this call.
    """
    label = validate_label(label)
    tolerance = validate_tolerance(tolerance)
    return _scan_region(grid1, grid2, label, tolerance, reporter)


def common_regions(names1: Iterable[str], names2: Iterable[str]) -> List[str]:
    """Names present in both sources, in the first source's order."""
    other = set(names2)
    return [n for n in names1 if n in other]


def run_regions(pairs, tolerance, reporter=None):
    """
    Run the region loop once per (label, grid1, grid2) pair and sum the
    results. Pairs may be produced lazily.
    The tolerance is taken as already validated by the caller.
    """
    overall = ComparisonResult()

    for label, grid1, grid2 in pairs:
        label = validate_label(label)
        if reporter is not None:
            reporter.info(f"Comparing sheet: {label}")
        overall.fold(_scan_region(grid1, grid2, label, tolerance, reporter))

    return overall


def compare_regions(pairs: Iterable[Tuple[str, Grid, Grid]], tolerance: float,
                    reporter: Optional[DifferenceReporter] = None) -> ComparisonResult:
    """Validate the tolerance once, then run_regions."""
    return run_regions(pairs, validate_tolerance(tolerance), reporter)
