import math
from dataclasses import dataclass
from typing import Optional

from compare_errors import ValidationError


DEFAULT_TOLERANCE = 1e-15
DEFAULT_SHEET = "Sheet1"


# -----------------------------
# Boundary validation
# -----------------------------
def validate_tolerance(value) -> float:
    """
    Tolerance must be a non-negative finite float.
    Checked once at the boundary, the comparison loop trusts it.
    """
    try:
        tol = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid tolerance value '{value}'") from None

    if math.isnan(tol) or math.isinf(tol):
        raise ValidationError("Tolerance must be a valid finite number")
    if tol < 0:
        raise ValidationError("Tolerance must be non-negative")
    return tol


def validate_path(path, name="path") -> str:
    if path is None or not str(path).strip():
        raise ValidationError(f"{name} cannot be null or empty")
    return str(path)


def validate_label(label) -> str:
    if label is None or not str(label).strip():
        raise ValidationError("Region identifier cannot be null or empty")
    return str(label)


@dataclass(frozen=True)
class ComparisonConfig:
    tolerance: float = DEFAULT_TOLERANCE
    sheet: Optional[str] = None
    compare_all: bool = False

    def __post_init__(self):
        object.__setattr__(self, "tolerance", validate_tolerance(self.tolerance))
        if self.sheet is not None:
            validate_label(self.sheet)

    @property
    def sheet_name(self) -> str:
        return self.sheet or DEFAULT_SHEET
