"""Tests for FileReport building and persistence."""

import json
import logging
import re
from datetime import datetime

import pytest
from pydantic import ValidationError

from wordwatch.analysis.report import (
    FileMetadata, build_report, report_path_for, write_report,
)
from wordwatch.analysis.word_counter import count_words, top_words

TIME_RE = re.compile(r"^\d{2}-\d{2}-\d{4} \d{2}:\d{2}:\d{2} (AM|PM)$")


def _report(text="b a b", name="notes.txt", timestamp=None):
    tally, lines = count_words(text.splitlines())
    meta = FileMetadata(name=name, size_in_bytes=len(text), last_modified=datetime(2024, 3, 5, 14, 7, 9))
    return build_report(meta, tally, lines, top_words(tally, 10), timestamp=timestamp)


class TestBuildReport:
    """Test assembly of the report value."""

    def test_fields(self):
        report = _report(timestamp=datetime(2024, 3, 6, 9, 0, 0))

        assert report.file_name == "notes.txt"
        assert report.line_count == 1
        assert report.top_ten_words == {"b": 2, "a": 1}
        assert report.word_frequencies == {"b": 2, "a": 1}
        assert report.timestamp == datetime(2024, 3, 6, 9, 0, 0)

    def test_report_is_frozen(self):
        report = _report()
        with pytest.raises(ValidationError):
            report.line_count = 99

    def test_timestamp_defaults_to_now(self):
        before = datetime.now()
        report = _report()
        assert before <= report.timestamp <= datetime.now()


class TestSerialization:
    """Test the on-disk JSON layout."""

    def test_key_order_and_formats(self):
        data = json.loads(_report(timestamp=datetime(2024, 3, 6, 21, 30, 1)).to_json())

        assert list(data) == [
            "Timestamp", "FileName", "SizeInBytes", "DateLastModified",
            "LineCount", "TopTenWords", "WordFrequencies",
        ]
        assert data["Timestamp"] == "03-06-2024 09:30:01 PM"
        assert data["DateLastModified"] == "03-05-2024 02:07:09 PM"
        assert TIME_RE.match(data["Timestamp"])

    def test_top_words_keep_rank_order(self):
        data = json.loads(_report("x y y z z z").to_json())
        assert list(data["TopTenWords"].items()) == [("z", 3), ("y", 2), ("x", 1)]

    def test_non_ascii_preserved(self):
        text = _report("Ñandú ñandú").to_json()
        assert "ñandú" in text


class TestWriteReport:
    """Test writing the sibling report file."""

    def test_report_path_for(self, tmp_path):
        assert report_path_for(tmp_path / "a.txt") == tmp_path / "a.json"
        assert report_path_for(tmp_path / "a.b.txt", ".rep") == tmp_path / "a.b.rep"
        assert report_path_for(tmp_path / "noext", ".json") == tmp_path / "noext.json"

    def test_writes_next_to_source(self, tmp_path):
        source = tmp_path / "notes.txt"
        written = write_report(_report(), source, extension=".json", indent=2)

        assert written == tmp_path / "notes.json"
        data = json.loads(written.read_text(encoding="utf-8"))
        assert data["FileName"] == "notes.txt"
        assert data["WordFrequencies"] == {"b": 2, "a": 1}

    def test_write_failure_is_logged_not_raised(self, tmp_path, caplog):
        source = tmp_path / "missing_dir" / "notes.txt"
        with caplog.at_level(logging.ERROR, logger="wordwatch.analysis.report"):
            assert write_report(_report(), source) is None

        assert "Error writing report" in caplog.text
        assert not (tmp_path / "missing_dir").exists()
