from dataclasses import dataclass
from typing import Callable, List, Optional

from cell_compare import ComparisonOutcome, Outcome, format_number


MAX_REPORTED_DIFFERENCES = 100

# line kinds handed to the presentation layer
INFO = "info"
MISMATCH = "mismatch"
SUPPRESSED = "suppressed"
ERROR = "error"


@dataclass(frozen=True)
class DiffRecord:
    label: str
    row: int
    col: int
    outcome: ComparisonOutcome

    @property
    def kind(self) -> str:
        if self.outcome.kind is Outcome.NUMERIC_MISMATCH:
            return "Numeric"
        return "Type" if self.outcome.type_mismatch else "Text"

    def describe(self) -> str:
        where = f"{self.label}!R{self.row}C{self.col}"
        left, right = self.outcome.left, self.outcome.right
        if self.outcome.kind is Outcome.NUMERIC_MISMATCH:
            return (f"Numeric mismatch at {where}: "
                    f"{format_number(left.number)} vs {format_number(right.number)}")
        return f"{self.kind} mismatch at {where}: '{left.text}' vs '{right.text}'"


@dataclass(frozen=True)
class ReportLine:
    kind: str
    text: str


class DifferenceReporter:
    """
    Output governor for one whole comparison run.

    Shows the first `limit` difference records, then a single suppression
    notice; everything after that is dropped. Only display is capped, the
    comparison loop keeps counting.
    Info/error lines are not governed.
    """

    def __init__(self, sink: Optional[Callable[[ReportLine], None]] = None,
                 limit: int = MAX_REPORTED_DIFFERENCES):
        self.sink = sink
        self.limit = limit
        self.lines: List[ReportLine] = []
        self.received = 0

    @property
    def shown(self) -> int:
        return min(self.received, self.limit)

    @property
    def suppressed(self) -> bool:
        return self.received > self.limit

    def add(self, record: DiffRecord):
        self.received += 1
        if self.received <= self.limit:
            self._emit(ReportLine(MISMATCH, record.describe()))
        elif self.received == self.limit + 1:
            self._emit(ReportLine(
                SUPPRESSED,
                f"... suppressing further difference output (max {self.limit} shown)",
            ))

    def info(self, text: str):
        self._emit(ReportLine(INFO, text))

    def error(self, text: str):
        self._emit(ReportLine(ERROR, text))

    def _emit(self, line: ReportLine):
        self.lines.append(line)
        if self.sink is not None:
            self.sink(line)
