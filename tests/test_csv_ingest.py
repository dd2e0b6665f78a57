import codecs
import logging

import pytest

import csv_ingest
from compare_errors import (
    IngestionReadError,
    IngestionRowCountError,
    IngestionSizeError,
    SourceNotFoundError,
    ValidationError,
)
from csv_ingest import detect_delimiter, detect_encoding, read_delimited


@pytest.fixture
def write_csv(tmp_path):
    counter = iter(range(1000))

    def _write(content, encoding="utf-8", raw=None, suffix=".csv"):
        path = tmp_path / f"data{next(counter)}{suffix}"
        if raw is not None:
            path.write_bytes(raw)
        else:
            path.write_bytes(content.encode(encoding))
        return str(path)

    return _write


class TestDelimiter:

    @pytest.mark.parametrize("sample, expected", [
        ("A,B,C\n1,2,3\n", ","),
        ("A;B;C\n1;2;3\n", ";"),
        ("A\tB\tC\n1\t2\t3\n", "\t"),
        ("A|B|C\n1|2|3\n", "|"),
        ("single\nvalue\n", ","),
        ("", ","),
    ])
    def test_detect(self, sample, expected):
        assert detect_delimiter(sample) == expected

    def test_quoted_delimiters_are_ignored(self):
        assert detect_delimiter('x;"a,b,c";y\n1;2;3\n') == ";"

    def test_consistent_candidate_wins(self):
        sample = "a;b;c\n1,5;2;3\n4;5;6\n"
        assert detect_delimiter(sample) == ";"


class TestEncoding:

    @pytest.mark.parametrize("bom, codec, expected", [
        (codecs.BOM_UTF8, "utf-8", "utf-8-sig"),
        (codecs.BOM_UTF16_LE, "utf-16-le", "utf-16"),
        (codecs.BOM_UTF16_BE, "utf-16-be", "utf-16"),
        (codecs.BOM_UTF32_LE, "utf-32-le", "utf-32"),
        (codecs.BOM_UTF32_BE, "utf-32-be", "utf-32"),
    ])
    def test_bom_files_are_read(self, write_csv, bom, codec, expected):
        path = write_csv(None, raw=bom + "Column\n999\n".encode(codec))
        assert detect_encoding(path) == expected
        assert read_delimited(path) == [["Column"], ["999"]]

    def test_no_bom_defaults_to_utf8(self, write_csv):
        path = write_csv("Name,Age\nAlice,30\nBob,25\n")
        assert detect_encoding(path) == "utf-8"
        assert read_delimited(path) == [["Name", "Age"], ["Alice", "30"], ["Bob", "25"]]

    def test_non_ascii_utf8(self, write_csv):
        path = write_csv("Stadt;Größe\nZürich;1\n")
        assert read_delimited(path) == [["Stadt", "Größe"], ["Zürich", "1"]]

    def test_detection_failure_falls_back_to_utf8(self, write_csv, monkeypatch, caplog):
        path = write_csv("A,B\n1,2\n")

        def broken(_path):
            raise PermissionError("locked")

        monkeypatch.setattr(csv_ingest, "detect_encoding", broken)
        with caplog.at_level(logging.WARNING, logger="csv_ingest"):
            rows = read_delimited(path)

        assert rows == [["A", "B"], ["1", "2"]]
        assert "Could not detect encoding" in caplog.text

    def test_undecodable_bytes(self, write_csv):
        path = write_csv(None, raw=b"A,B\n\xff\xfe\xfa,1\n")
        with pytest.raises(IngestionReadError):
            read_delimited(path)


class TestParsing:

    def test_header_is_data(self, write_csv):
        rows = read_delimited(write_csv("A,B\n1,2\n3,4\n"))
        assert rows == [["A", "B"], ["1", "2"], ["3", "4"]]

    def test_short_rows_are_kept_short(self, write_csv):
        rows = read_delimited(write_csv("A,B,C\n1,2,3\n4,5\n"))
        assert rows[2] == ["4", "5"]

    def test_whitespace_is_preserved(self, write_csv):
        rows = read_delimited(write_csv("a , b\n"))
        assert rows == [["a ", " b"]]

    def test_quoted_fields(self, write_csv):
        rows = read_delimited(write_csv('Name,Note\n"Smith, John","He said ""hi"""\n'))
        assert rows[1] == ["Smith, John", 'He said "hi"']

    def test_newline_inside_quotes(self, write_csv):
        rows = read_delimited(write_csv('A,B\n"line1\nline2",x\n'))
        assert rows == [["A", "B"], ["line1\nline2", "x"]]

    def test_unterminated_quote_does_not_raise(self, write_csv):
        rows = read_delimited(write_csv('A,B\n1,"unclosed\n'))
        assert rows[0] == ["A", "B"]
        assert len(rows) == 2
        assert rows[1][0] == "1"

    def test_blank_lines_are_skipped(self, write_csv):
        rows = read_delimited(write_csv("A\n\nB\n"))
        assert rows == [["A"], ["B"]]

    def test_empty_file(self, write_csv):
        assert read_delimited(write_csv("")) == []

    def test_tab_file(self, write_csv):
        rows = read_delimited(write_csv("Name\tAge\tCity\nAlice\t30\tNY\n", suffix=".tsv"))
        assert rows == [["Name", "Age", "City"], ["Alice", "30", "NY"]]


class TestLimits:

    def test_file_too_large_is_rejected_before_parsing(self, tmp_path, monkeypatch):
        path = tmp_path / "huge.csv"
        with open(path, "wb") as f:
            f.truncate(101 * 1024 * 1024)

        def must_not_run(_path):
            raise AssertionError("file was opened for parsing")

        monkeypatch.setattr(csv_ingest, "detect_encoding", must_not_run)
        with pytest.raises(IngestionSizeError, match="exceeds maximum allowed size"):
            read_delimited(str(path))

    def test_size_ceiling_is_inclusive(self, write_csv):
        path = write_csv("A,B\n1,2\n")
        assert read_delimited(path, max_bytes=8) == [["A", "B"], ["1", "2"]]
        with pytest.raises(IngestionSizeError):
            read_delimited(path, max_bytes=7)

    def test_row_ceiling_small(self, write_csv):
        ok = write_csv("".join(f"{i}\n" for i in range(5)))
        assert len(read_delimited(ok, max_rows=5)) == 5

        too_many = write_csv("".join(f"{i}\n" for i in range(6)))
        with pytest.raises(IngestionRowCountError, match="exceeds the maximum allowed"):
            read_delimited(too_many, max_rows=5)

    def test_one_million_rows_is_accepted(self, write_csv):
        path = write_csv("1\n" * 1_000_000)
        assert len(read_delimited(path)) == 1_000_000

    def test_one_million_and_one_rows_is_rejected(self, write_csv):
        path = write_csv("1\n" * 1_000_001)
        with pytest.raises(IngestionRowCountError):
            read_delimited(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceNotFoundError):
            read_delimited(str(tmp_path / "nope.csv"))

    def test_missing_file_is_a_read_error(self, tmp_path):
        with pytest.raises(IngestionReadError):
            read_delimited(str(tmp_path / "nope.csv"))

    @pytest.mark.parametrize("path", ["", "  ", None])
    def test_invalid_path(self, path):
        with pytest.raises(ValidationError):
            read_delimited(path)
