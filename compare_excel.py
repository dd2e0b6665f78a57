# =============================================================================
# Excel / CSV Compare Tool
# =============================================================================
#
# PURPOSE:
# --------
# Reports cell-level differences between two worksheets or two delimited
# text files. Numbers are compared within a tolerance, everything else as
# exact text. Meant for checking that two data exports are equivalent.
# Designed for automation environments like Tosca / CI pipelines.
#
# KEY FEATURES:
# -------------
# • Compares only the union of the populated area of both sheets
# • Numeric compare with absolute tolerance (--tolerance, default 1e-15)
# • Number vs text in the same cell is reported as a type mismatch
# • CSV/TSV: BOM-based encoding detection, delimiter auto-detection
#   (comma, semicolon, tab, pipe), short rows padded with empty fields
# • Size (100 MB) and row (1,000,000) limits for delimited files
# • At most 100 difference lines are printed, counts are always complete
#
# INPUT OPTIONS:
# --------------
# • --input_dir   : Folder containing both files
# • --file1       : Reference file name (or full path)
# • --file2       : Target file name (or full path)
# • --all         : Compare all sheets present in both workbooks
# • --sheet       : Sheet to compare (default Sheet1)
# • --tolerance   : Absolute numeric tolerance
#
# TOSCA OUTPUT FORMAT:
# --------------------
#   RESULT=PASS/FAIL
#   SHEETS_COMPARED=...
#   CELLS_COMPARED=...
#   NUMERIC_MISMATCHES=...
#   TEXT_MISMATCHES=...
#   TOTAL_MISMATCHES=...
#   FAIL_MESSAGE=... (if applicable)
#   ----- SUMMARY_JSON_START -----
#   { full summary JSON }
#   ----- SUMMARY_JSON_END -----
#
# EXIT CODES:
# -----------
#   0 → PASS
#   1 → FAIL (differences found, or nothing could be compared)
#   2 → ERROR (script/config/runtime issue)
#
# =============================================================================

import os
import json
import logging
import argparse

from compare_config import DEFAULT_TOLERANCE, ComparisonConfig
from compare_modes import compare_all_sheets, compare_csv, compare_single_sheet
from diff_report import DifferenceReporter


# -----------------------------
# File type routing
# -----------------------------
EXCEL = "Excel"
CSV = "Csv"
UNKNOWN = "Unknown"

_EXTENSIONS = {
    ".xlsx": EXCEL,
    ".xlsm": EXCEL,
    ".xlsb": EXCEL,
    ".xls": EXCEL,
    ".csv": CSV,
    ".tsv": CSV,
    ".txt": CSV,
}


def detect_file_type(path):
    if not path or not str(path).strip():
        return UNKNOWN
    return _EXTENSIONS.get(os.path.splitext(path)[1].lower(), UNKNOWN)


# -----------------------------
# Console output
# -----------------------------
def print_line(line):
    print(line.text, flush=True)


def print_summary(summary):
    stats = summary["stats"]

    sheets = stats["regions_compared"]
    numeric = stats["numeric_mismatches"]
    text = stats["text_mismatches"]

    fail_reasons = []

    if not sheets: fail_reasons.append("sheets_compared=0")
    if numeric: fail_reasons.append(f"numeric_mismatches={numeric}")
    if text: fail_reasons.append(f"text_mismatches={text}")

    result = "PASS" if not fail_reasons else "FAIL"

    print(f"RESULT={result}")
    print(f"SHEETS_COMPARED={sheets}")
    print(f"CELLS_COMPARED={stats['cells_compared']}")
    print(f"NUMERIC_MISMATCHES={numeric}")
    print(f"TEXT_MISMATCHES={text}")
    print(f"TOTAL_MISMATCHES={stats['total_mismatches']}")

    if result == "FAIL":
        print("FAIL_MESSAGE=" + ", ".join(fail_reasons))

    print("----- SUMMARY_JSON_START -----")
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    print("----- SUMMARY_JSON_END -----")

    return 0 if result == "PASS" else 1


# -----------------------------
# MAIN
# -----------------------------
def build_parser():
    ap = argparse.ArgumentParser(
        description="Compare two Excel workbooks or two CSV files cell by cell."
    )

    ap.add_argument("--input_dir")
    ap.add_argument("--file1", required=True)
    ap.add_argument("--file2", required=True)
    ap.add_argument("--all", action="store_true", dest="compare_all")
    ap.add_argument("--sheet")
    ap.add_argument("--tolerance", "--float_tol", type=float, default=DEFAULT_TOLERANCE)
    ap.add_argument("--verbose", action="store_true")

    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.input_dir:
        file1_path = os.path.join(args.input_dir, args.file1)
        file2_path = os.path.join(args.input_dir, args.file2)
    else:
        file1_path = args.file1
        file2_path = args.file2

    try:
        config = ComparisonConfig(
            tolerance=args.tolerance, sheet=args.sheet, compare_all=args.compare_all
        )

        for path in (file1_path, file2_path):
            if not os.path.isfile(path):
                raise FileNotFoundError(f"File not found: {path}")

        type1 = detect_file_type(file1_path)
        type2 = detect_file_type(file2_path)
        if type1 != type2 or type1 == UNKNOWN:
            raise ValueError(
                "Both files must be the same supported type "
                f"(.xlsx, .xlsm, .xlsb, .xls, .csv, .tsv, .txt): file1={type1}, file2={type2}"
            )

        print(f"FILE1={os.path.abspath(file1_path)}")
        print(f"FILE2={os.path.abspath(file2_path)}")
        print(f"FILE_TYPE={type1}")
        print(f"TOLERANCE={config.tolerance}")

        reporter = DifferenceReporter(sink=print_line)

        if type1 == CSV:
            if config.compare_all:
                print("Note: --all flag is ignored for CSV files (CSV files have no sheets)")
            if config.sheet is not None:
                print("Note: --sheet flag is ignored for CSV files (CSV files have no sheets)")
            result = compare_csv(file1_path, file2_path, config.tolerance, reporter)
            mode = "csv"
        elif config.compare_all:
            if config.sheet is not None:
                print("Warning: --sheet is ignored when --all is specified")
            result = compare_all_sheets(file1_path, file2_path, config.tolerance, reporter)
            mode = "all_sheets"
        else:
            result = compare_single_sheet(
                file1_path, file2_path, config.sheet_name, config.tolerance, reporter
            )
            mode = "single_sheet"

        summary = {
            "file1": os.path.abspath(file1_path),
            "file2": os.path.abspath(file2_path),
            "file_type": type1,
            "mode": mode,
            "sheet": config.sheet_name if mode == "single_sheet" else None,
            "tolerance": config.tolerance,
            "stats": result.to_dict(),
            "differences_shown": reporter.shown,
            "output_suppressed": reporter.suppressed,
        }
        return print_summary(summary)

    except Exception as e:
        print("ERROR=YES")
        print(f"ERROR_MESSAGE={e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
