# blame_data.py
"""
Line-porcelain blame parsing for a single file.

`git blame --line-porcelain` repeats the full commit metadata for every line,
so each source line arrives as one block:

    <hash> <orig_line> <final_line> [<group_size>]
    author ...
    author-time <epoch seconds>
    ...
    \t<line content>

This module turns that text into an ordered list of BlameRecord objects and
offers a small wrapper that runs the blame through GitPython.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pandas as pd
from git import Repo, GitCommandError

logger = logging.getLogger(__name__)

# A block header starts with the commit hash followed by whitespace.
HEADER_RE = re.compile(r"^([0-9a-fA-F]+)\s")
AUTHOR_TIME_PREFIX = "author-time "

RECORD_COLUMNS = ["line_number", "commit_id", "timestamp"]


@dataclass(frozen=True)
class BlameRecord:
    """Attribution of one source line to a commit and its author time."""

    line_number: int
    commit_id: str
    timestamp: int


def parse_line_porcelain(text: str) -> List[BlameRecord]:
    """
    Parses line-porcelain blame output into records ordered by line number.

    Every header line starts a new source line. A block is emitted once the
    next header (or the end of input) closes it, and only if both the commit
    id and the author time were seen. Incomplete blocks are dropped, but
    still consume their line number so later lines keep their position.
    """
    records: List[BlameRecord] = []
    if not text:
        return records

    pending_commit: Optional[str] = None
    pending_timestamp: Optional[int] = None
    pending_line = 0
    ordinal = 0
    skipped = 0

    for line in text.splitlines():
        header = HEADER_RE.match(line)
        if header:
            # A new header closes the previous block.
            if pending_commit is not None and pending_timestamp is not None:
                records.append(
                    BlameRecord(pending_line, pending_commit, pending_timestamp)
                )
            elif pending_commit is not None:
                skipped += 1

            ordinal += 1
            pending_line = ordinal
            pending_commit = header.group(1)
            pending_timestamp = None

        elif line.startswith(AUTHOR_TIME_PREFIX):
            value = line[len(AUTHOR_TIME_PREFIX) :].strip()
            try:
                pending_timestamp = int(value)
            except ValueError:
                pending_timestamp = None

    # The last block has no following header; flush it here.
    if pending_commit is not None and pending_timestamp is not None:
        records.append(BlameRecord(pending_line, pending_commit, pending_timestamp))
    elif pending_commit is not None:
        skipped += 1

    if skipped:
        logger.debug(f"Skipped {skipped} blame block(s) without an author-time")
    return records


def records_to_frame(records: List[BlameRecord]) -> pd.DataFrame:
    """Builds a DataFrame with one row per record, keeping the given order."""
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    return pd.DataFrame(
        [(r.line_number, r.commit_id, r.timestamp) for r in records],
        columns=RECORD_COLUMNS,
    )


class FileBlameData:
    """
    Runs `git blame --line-porcelain` for one file and holds the parsed result.

    Nothing is kept between instances; build a new one for every request.
    """

    def __init__(self, repo: Repo, file_path: str, rev: Optional[str] = None):
        """
        Blames the file and parses the output.

        Args:
            repo: The git.Repo containing the file
            file_path: Path of the file, absolute or relative to the work tree
            rev: Revision to blame at (None = working tree)
        """
        self.repo = repo
        self.rev = rev
        self.file_path = self._relative_path(file_path)

        args = ["--line-porcelain"]
        if rev:
            args.append(rev)
        args.extend(["--", self.file_path])

        try:
            self.raw_text = self.repo.git.blame(*args)
        except GitCommandError as e:
            raise RuntimeError(f"git blame failed for {self.file_path}: {e}") from e

        self._records = parse_line_porcelain(self.raw_text)
        logger.debug(f"Parsed {len(self._records)} blamed lines from {self.file_path}")

    def _relative_path(self, file_path: str) -> str:
        path = Path(file_path)
        if not path.is_absolute():
            return path.as_posix()
        work_tree = Path(self.repo.working_tree_dir).resolve()
        # Use as_posix() so git receives forward slashes on every platform.
        return path.resolve().relative_to(work_tree).as_posix()

    @property
    def records(self) -> List[BlameRecord]:
        """Parsed blame records in line order."""
        return self._records

    @property
    def frame(self) -> pd.DataFrame:
        """DataFrame of the parsed records."""
        return records_to_frame(self._records)
