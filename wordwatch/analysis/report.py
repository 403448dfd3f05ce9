"""
wordwatch/analysis/report.py
────────────────────────────
• FileReport – immutable summary of one analyzed text file
• build_report() – assembles metadata + tally into a FileReport
• write_report() – persists the report next to its source file as JSON

Write failures are logged and swallowed so a broken report never takes the
watch loop down with it.
"""

from __future__ import annotations

import json, logging, pathlib
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from wordwatch.config import CONFIG
from wordwatch.errors import ReportWriteError

LOG = logging.getLogger(__name__)

TIME_FORMAT = "%m-%d-%Y %I:%M:%S %p"

PathLike = Union[str, pathlib.Path]


class FileMetadata(BaseModel):
    """Filesystem facts gathered separately from the content scan."""

    model_config = ConfigDict(frozen=True)

    name: str
    size_in_bytes: int = Field(ge=0)
    last_modified: datetime


class FileReport(BaseModel):
    """
    Result of analyzing a single text file.

    Field order matches the on-disk layout; aliases are the serialized keys.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime = Field(alias="Timestamp")
    file_name: str = Field(alias="FileName")
    size_in_bytes: int = Field(alias="SizeInBytes", ge=0)
    date_last_modified: datetime = Field(alias="DateLastModified")
    line_count: int = Field(alias="LineCount", ge=0)
    top_ten_words: Dict[str, int] = Field(alias="TopTenWords")
    word_frequencies: Dict[str, int] = Field(alias="WordFrequencies")

    @field_serializer("timestamp", "date_last_modified")
    def _format_time(self, value: datetime) -> str:
        return value.strftime(TIME_FORMAT)

    @property
    def top_words(self) -> List[Tuple[str, int]]:
        return list(self.top_ten_words.items())

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize with the report's keys, keeping non-ASCII words readable."""
        return json.dumps(self.model_dump(by_alias=True), indent=indent, ensure_ascii=False)


def build_report(metadata: FileMetadata,
                 tally: Mapping[str, int],
                 line_count: int,
                 top: List[Tuple[str, int]],
                 timestamp: Optional[datetime] = None) -> FileReport:
    """
    Assemble a FileReport from file metadata and analyzer output.

    Args:
        metadata: Name, size and modification time of the source file
        tally: Word -> count mapping, in first-seen order
        line_count: Number of lines read from the file
        top: Ranked (word, count) pairs
        timestamp: Time of analysis; defaults to now (local time)

    Returns:
        The frozen report
    """
    return FileReport(
        timestamp=timestamp or datetime.now(),
        file_name=metadata.name,
        size_in_bytes=metadata.size_in_bytes,
        date_last_modified=metadata.last_modified,
        line_count=line_count,
        top_ten_words=dict(top),
        word_frequencies=dict(tally),
    )


def report_path_for(source: PathLike, extension: str = ".json") -> pathlib.Path:
    """Sibling path of *source* with its last suffix replaced by *extension*."""
    return pathlib.Path(source).with_suffix(extension)


def _dump(report: FileReport, target: pathlib.Path, indent: Optional[int]) -> None:
    try:
        target.write_text(report.to_json(indent=indent), encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise ReportWriteError(target, f"Could not write report '{target.name}': {e}") from e


def write_report(report: FileReport,
                 source_path: PathLike,
                 extension: Optional[str] = None,
                 indent: Optional[int] = None) -> Optional[pathlib.Path]:
    """
    Write *report* next to *source_path*.

    Args:
        report: The report to persist
        source_path: The analyzed file; the report lands in the same folder
        extension: Report extension (defaults to report.extension)
        indent: JSON indent width (defaults to report.indent)

    Returns:
        Path of the written report, or None when writing failed
    """
    extension = extension or CONFIG.get("report.extension", ".json")
    if indent is None:
        indent = CONFIG.get("report.indent", 2)
    target = report_path_for(source_path, extension)

    try:
        _dump(report, target, indent)
    except ReportWriteError as err:
        LOG.error("Error writing report: %s (cause: %r)", err, err.__cause__)
        return None

    LOG.debug("Report for %s written to %s", report.file_name, target)
    return target
