import codecs
import csv
import logging
import os
from collections import Counter
from typing import List

from compare_config import validate_path
from compare_errors import (
    IngestionReadError,
    IngestionRowCountError,
    IngestionSizeError,
    SourceNotFoundError,
)

logger = logging.getLogger(__name__)


MAX_FILE_BYTES = 100 * 1024 * 1024
MAX_ROWS = 1_000_000

DELIMITERS = (",", ";", "\t", "|")
DEFAULT_DELIMITER = ","
_SNIFF_LINES = 20
_SNIFF_CHARS = 64 * 1024

# 4-byte marks first: the UTF-32 LE mark starts with the UTF-16 LE one.
# The generic utf-16/utf-32 codecs read the mark and drop it.
_BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


# -----------------------------
# Encoding / delimiter detection
# -----------------------------
def detect_encoding(path: str) -> str:
    """Codec from the byte-order mark; plain utf-8 when there is none."""
    with open(path, "rb") as f:
        head = f.read(4)
    for bom, encoding in _BOMS:
        if head.startswith(bom):
            return encoding
    return "utf-8"


def _count_unquoted(line, delimiter):
    count = 0
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            count += 1
    return count


def detect_delimiter(sample: str) -> str:
    """
    Pick the separator by frequency over the first lines of the sample:
    score = mean count per line * share of lines having the most common count.
    Ties keep the earlier candidate, comma when nothing is found.
    """
    lines = [ln for ln in sample.splitlines() if ln][:_SNIFF_LINES]
    best, best_score = DEFAULT_DELIMITER, 0.0

    for delim in DELIMITERS:
        counts = [_count_unquoted(ln, delim) for ln in lines]
        if not counts or max(counts) == 0:
            continue
        mean = sum(counts) / len(counts)
        consistency = Counter(counts).most_common(1)[0][1] / len(counts)
        score = mean * consistency
        if score > best_score:
            best, best_score = delim, score

    return best


# -----------------------------
# Reader
# -----------------------------
def _check_size(path, max_bytes):
    try:
        size = os.stat(path).st_size
    except FileNotFoundError:
        raise SourceNotFoundError(path, f"File not found: {path}") from None
    except OSError as e:
        raise IngestionReadError(path, f"Cannot access '{path}' - {e}") from e

    if size > max_bytes:
        raise IngestionSizeError(
            path,
            f"File size ({size:,} bytes) exceeds maximum allowed size ({max_bytes:,} bytes)",
        )


def read_delimited(path: str, max_bytes: int = MAX_FILE_BYTES,
                   max_rows: int = MAX_ROWS) -> List[List[str]]:
    """
    Read a delimited text file into rows of string fields.

    - size ceiling checked before the file is opened for parsing
    - row ceiling checked per row while streaming
    - encoding from the BOM, delimiter sniffed per file
    - every row is data (no header handling), blank lines are skipped
    - malformed records are skipped/recovered, never raised
    """
    path = validate_path(path)
    _check_size(path, max_bytes)

    name = os.path.basename(path)
    try:
        encoding = detect_encoding(path)
    except OSError as e:
        logger.warning(
            "Could not detect encoding for '%s', using UTF-8. Error: %s", name, e
        )
        encoding = "utf-8"

    rows: List[List[str]] = []
    try:
        with open(path, "r", encoding=encoding, newline="") as fh:
            delimiter = detect_delimiter(fh.read(_SNIFF_CHARS))
            fh.seek(0)

            reader = csv.reader(fh, delimiter=delimiter, strict=False)
            while True:
                try:
                    record = next(reader)
                except StopIteration:
                    break
                except csv.Error as e:
                    logger.debug(
                        "Skipping malformed record near line %d of '%s': %s",
                        reader.line_num, name, e,
                    )
                    continue

                if not record:
                    continue
                if len(rows) >= max_rows:
                    raise IngestionRowCountError(
                        path,
                        f"File contains more than {max_rows:,} rows, "
                        f"which exceeds the maximum allowed",
                    )
                rows.append(record)
    except FileNotFoundError:
        raise SourceNotFoundError(path, f"File not found: {path}") from None
    except UnicodeDecodeError as e:
        raise IngestionReadError(path, f"Cannot decode '{name}' as {encoding} - {e}") from e
    except OSError as e:
        raise IngestionReadError(path, f"Cannot read '{name}' - {e}") from e

    logger.info(
        "Read '%s': encoding=%s, delimiter=%r, rows=%d",
        name, encoding, delimiter, len(rows),
    )
    return rows
