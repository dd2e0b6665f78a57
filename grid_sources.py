from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from grid_compare import CellRange


# -----------------------------
# Worksheet grid (pandas frame)
# -----------------------------
class SheetGrid:
    """
    Read-only view over one worksheet's cells.
    Frame position [0, 0] is cell R1C1.
    """

    def __init__(self, frame: pd.DataFrame):
        self.frame = frame
        self._values = frame.to_numpy(dtype=object)
        self._used = self._bounding_box()

    def _bounding_box(self) -> Optional[CellRange]:
        if self._values.size == 0:
            return None
        filled = ~(pd.isna(self.frame).to_numpy() | (self._values == ""))
        rows = np.flatnonzero(filled.any(axis=1))
        cols = np.flatnonzero(filled.any(axis=0))
        if rows.size == 0:
            return None
        return CellRange(int(rows[0]) + 1, int(rows[-1]) + 1,
                         int(cols[0]) + 1, int(cols[-1]) + 1)

    def used_range(self) -> Optional[CellRange]:
        return self._used

    def cell_at(self, row: int, col: int):
        r, c = row - 1, col - 1
        n_rows, n_cols = self._values.shape
        if r >= n_rows or c >= n_cols:
            return None
        return self._values[r, c]


def sheet_frame(worksheet, read_only: bool = False) -> pd.DataFrame:
    """Cell values of an openpyxl worksheet, starting from A1 so positions hold."""
    if read_only:
        # stored dimensions are often wrong in files written by other tools
        worksheet.reset_dimensions()
    data = [[cell.value for cell in row] for row in worksheet.rows]
    return pd.DataFrame(data, dtype=object)


def open_workbook(path: str) -> pd.ExcelFile:
    return pd.ExcelFile(path, engine="openpyxl")


def read_sheet(book: pd.ExcelFile, sheet_name: str) -> SheetGrid:
    wb = book.book
    return SheetGrid(sheet_frame(wb[sheet_name], read_only=wb.read_only))


def iter_sheet_pairs(book1: pd.ExcelFile, book2: pd.ExcelFile,
                     names: Sequence[str]) -> Iterator[Tuple[str, SheetGrid, SheetGrid]]:
    # one sheet pair in memory at a time
    for name in names:
        yield name, read_sheet(book1, name), read_sheet(book2, name)


# -----------------------------
# Row-table grid (delimited text)
# -----------------------------
class TableGrid:
    """
    Grid over ingested rows: rows are the row dimension, the widest row's
    field count is the column dimension. Missing trailing fields read as empty.
    """

    def __init__(self, rows: List[List[str]]):
        self.rows = rows
        self.width = max((len(r) for r in rows), default=0)

    def used_range(self) -> Optional[CellRange]:
        if not self.rows or self.width == 0:
            return None
        return CellRange(1, len(self.rows), 1, self.width)

    def cell_at(self, row: int, col: int):
        if row > len(self.rows):
            return None
        fields = self.rows[row - 1]
        if col > len(fields):
            return None
        return fields[col - 1]
