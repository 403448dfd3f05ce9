"""
wordwatch/analysis/word_counter.py
──────────────────────────────────
Streams a text file line by line, tallies word frequencies case-insensitively
and ranks the most frequent words.  Encoding and top-N size come from the
`analysis` section of configs/wordwatch.yaml.
"""

from __future__ import annotations

import logging, os, pathlib, re
from collections import Counter
from datetime import datetime
from operator import itemgetter
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from wordwatch.analysis.report import FileMetadata, FileReport, build_report
from wordwatch.config import CONFIG
from wordwatch.errors import FileAccessError

LOG = logging.getLogger(__name__)

PathLike = Union[str, pathlib.Path]

# Anything outside this set (apostrophes, underscores, digits…) stays in the word
DELIMITERS = " \t\n.,!?;:\"()[]{}-+&"
_SPLIT = re.compile("[" + re.escape(DELIMITERS) + "]+")


# ── tokenizing / tallying ───────────────────────────────────────────────────
def tokenize(line: str) -> List[str]:
    """Split *line* on DELIMITERS and lowercase every non-empty token."""
    return [tok.lower() for tok in _SPLIT.split(line) if tok]


def count_words(lines: Iterable[str]) -> Tuple[Counter, int]:
    """
    Tally words over *lines*.

    Every line counts toward the line total, even when it yields no words.

    Returns:
        (tally, line_count) – the tally iterates in first-seen order
    """
    tally: Counter = Counter()
    line_count = 0
    for line in lines:
        line_count += 1
        tally.update(tokenize(line))
    return tally, line_count


def top_words(tally: Mapping[str, int], n: int = 10) -> List[Tuple[str, int]]:
    """
    Highest-count entries of *tally*, at most *n* of them.

    The sort is stable, so equal counts keep the tally's first-seen order.
    """
    if n <= 0:
        return []
    return sorted(tally.items(), key=itemgetter(1), reverse=True)[:n]


# ── file helpers ────────────────────────────────────────────────────────────
def _read_lines(path: pathlib.Path, encoding: str, errors: str) -> Iterator[str]:
    # newline=None: \n, \r\n and \r all terminate a line
    with open(path, "r", encoding=encoding, errors=errors, newline=None) as fh:
        for line in fh:
            yield line.rstrip("\n")


def _stat(path: pathlib.Path) -> FileMetadata:
    st = os.stat(path)
    return FileMetadata(
        name=path.name,
        size_in_bytes=st.st_size,
        last_modified=datetime.fromtimestamp(st.st_mtime),
    )


class WordAnalyzer:
    """Turns a text file into a FileReport."""

    def __init__(self, top_n: Optional[int] = None,
                 encoding: Optional[str] = None,
                 errors: Optional[str] = None):
        self.top_n = top_n if top_n is not None else CONFIG.get("analysis.top_n", 10)
        self.encoding = encoding or CONFIG.get("analysis.encoding", "utf-8-sig")
        self.errors = errors or CONFIG.get("analysis.errors", "replace")

    def scan(self, file_path: PathLike) -> Tuple[Counter, int]:
        """
        Read *file_path* and tally its words.

        Raises:
            FileAccessError: If the file cannot be opened or fails mid-read
        """
        path = pathlib.Path(file_path)
        try:
            return count_words(_read_lines(path, self.encoding, self.errors))
        except (OSError, UnicodeError) as e:
            raise FileAccessError(path, f"Cannot read '{path}': {e}") from e

    def analyze(self, file_path: PathLike) -> FileReport:
        """
        Analyze a text file.

        Args:
            file_path: The file to analyze

        Returns:
            A fully populated FileReport (not persisted)

        Raises:
            FileAccessError: If the file or its metadata cannot be read
        """
        path = pathlib.Path(file_path)
        tally, line_count = self.scan(path)
        try:
            metadata = _stat(path)
        except OSError as e:
            raise FileAccessError(path, f"Cannot stat '{path}': {e}") from e

        LOG.debug("Analyzed %s: %d lines, %d distinct words", path, line_count, len(tally))
        return build_report(metadata, tally, line_count, top_words(tally, self.top_n))
