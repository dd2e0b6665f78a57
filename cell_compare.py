import re
from dataclasses import dataclass
from datetime import datetime, date
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd


# -----------------------------
# Cell classification
# -----------------------------
# Culture-invariant decimal / exponential literal, ASCII digits and blanks
# only. Surrounding blanks are allowed for parsing; the raw text is kept
# untouched for text compare.
_NUMBER_RE = re.compile(
    r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$", re.ASCII
)


class CellKind(Enum):
    NUMBER = "number"
    TEXT = "text"
    EMPTY = "empty"


@dataclass(frozen=True)
class CellValue:
    kind: CellKind
    text: str = ""
    number: Optional[float] = None

    @property
    def is_number(self) -> bool:
        return self.kind is CellKind.NUMBER


EMPTY = CellValue(CellKind.EMPTY)


def format_number(v):
    """Shortest round-trip form, integral values without the trailing '.0'."""
    if v.is_integer() and abs(v) < 1e16:
        return str(int(v))
    return repr(v)


def parse_number(s):
    if not _NUMBER_RE.match(s):
        return None
    return float(s)


def classify_cell(x) -> CellValue:
    """
    Decide number / text / empty for one raw cell:
    - None, NaN, NaT and "" are Empty (same as a missing CSV field)
    - ints and floats (python or numpy) are numbers, bools are text
    - dates/timestamps become ISO text
    - strings are numbers when they parse as a decimal literal, else text
    """
    if x is None:
        return EMPTY

    if isinstance(x, str):
        if x == "":
            return EMPTY
        v = parse_number(x)
        if v is None:
            return CellValue(CellKind.TEXT, x)
        return CellValue(CellKind.NUMBER, x, v)

    # bool is an int subclass, keep it out of the numeric branch
    if isinstance(x, (bool, np.bool_)):
        return CellValue(CellKind.TEXT, str(bool(x)))

    if isinstance(x, float) and np.isnan(x):
        return EMPTY
    if pd.isna(x):
        return EMPTY

    if isinstance(x, (pd.Timestamp, datetime)):
        if x.time() == datetime.min.time():
            return CellValue(CellKind.TEXT, x.date().isoformat())
        return CellValue(CellKind.TEXT, x.isoformat(sep=" "))
    if isinstance(x, date):
        return CellValue(CellKind.TEXT, x.isoformat())

    if isinstance(x, (int, np.integer, float, np.floating)):
        v = float(x)
        return CellValue(CellKind.NUMBER, format_number(v), v)

    return classify_cell(str(x))


# -----------------------------
# Tolerance-aware compare
# -----------------------------
class Outcome(Enum):
    MATCH = "match"
    NUMERIC_MISMATCH = "numeric"
    TEXT_MISMATCH = "text"


@dataclass(frozen=True)
class ComparisonOutcome:
    kind: Outcome
    left: CellValue = EMPTY
    right: CellValue = EMPTY
    # number on one side only; counted as a text mismatch
    type_mismatch: bool = False

    @property
    def is_match(self) -> bool:
        return self.kind is Outcome.MATCH


MATCH = ComparisonOutcome(Outcome.MATCH)


def compare_cells(a: CellValue, b: CellValue, tolerance: float) -> ComparisonOutcome:
    if a.is_number and b.is_number:
        # strict '>' : a difference equal to the tolerance is a match
        if abs(a.number - b.number) > tolerance:
            return ComparisonOutcome(Outcome.NUMERIC_MISMATCH, a, b)
        return MATCH

    if a.is_number != b.is_number:
        return ComparisonOutcome(Outcome.TEXT_MISMATCH, a, b, type_mismatch=True)

    # ordinal compare, no trimming and no case folding
    if a.text != b.text:
        return ComparisonOutcome(Outcome.TEXT_MISMATCH, a, b)
    return MATCH
