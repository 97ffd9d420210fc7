# heatutils.py

"""
heatutils.py - Recency scoring and color helpers for blame heat-maps.

A collection of reusable utilities for turning one file's blame data into
per-line heat. This module contains three groups of functions:
1. Blame source: locate the repository and fetch line-porcelain blame text.
2. Scoring: normalize line ages to [0, 1] and count each commit's footprint.
3. Presentation helpers: map scores to colors, format labels, plot the map.
"""

import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from git import Repo, InvalidGitRepositoryError, NoSuchPathError

from blame_data import BlameRecord, FileBlameData, records_to_frame

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
DAYS_PER_YEAR = 365.25
FOOTPRINT_LABEL = "  ⟶ {count}x"


class BlameUnavailableError(RuntimeError):
    """Raised when blame text cannot be obtained for a file."""


class ScoredLine(NamedTuple):
    """Recency score and commit footprint of one source line."""

    line_number: int
    score: float
    commit_footprint: int


class LineExtreme(NamedTuple):
    """Diagnostic summary of the oldest or newest line in a run."""

    line_number: int
    commit_id: str
    date: str
    age_days: float
    age_years: float
    score: float
    commit_footprint: int


# ============================================================================
# BLAME SOURCE
# ============================================================================


def load_repository(repo_path: str) -> Repo:
    """Loads the Git repository that contains the given path."""
    try:
        return Repo(repo_path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise BlameUnavailableError(
            f"Could not load a repository for {repo_path}. Is it under git?"
        ) from e


def fetch_blame_text(file_path: str, rev: Optional[str] = None) -> str:
    """
    Returns `git blame --line-porcelain` output for a file.

    Raises BlameUnavailableError when the file is missing, lives outside a
    repository, is untracked, or git itself fails.
    """
    path = Path(file_path).resolve()
    if not path.is_file() and rev is None:
        raise BlameUnavailableError(f"No such file: {file_path}")

    repo = load_repository(str(path.parent))
    if repo.working_tree_dir is None:
        raise BlameUnavailableError(f"Repository for {file_path} has no work tree")

    try:
        return FileBlameData(repo, str(path), rev=rev).raw_text
    except (RuntimeError, ValueError) as e:
        raise BlameUnavailableError(f"Blame unavailable for {file_path}: {e}") from e


# ============================================================================
# SCORING
# ============================================================================


def current_timestamp() -> int:
    """Epoch seconds, captured once per scoring run."""
    return int(datetime.now(timezone.utc).timestamp())


def build_score_frame(
    records: List[BlameRecord], now: Optional[Union[int, float]] = None
) -> pd.DataFrame:
    """
    Computes age, commit footprint and recency score for every record.

    The newest line scores 1.0 and the oldest 0.0, linear in between. When
    every line has the same age the range is degenerate and all lines score
    1.0. Rows come back sorted by line number.
    """
    df = records_to_frame(records)
    if df.empty:
        return df.assign(age=[], commit_footprint=[], score=[])

    if now is None:
        now = current_timestamp()

    df = df.sort_values("line_number", kind="stable").reset_index(drop=True)
    df["age"] = now - df["timestamp"]

    max_age = df["age"].max()
    min_age = df["age"].min()

    # Counted over the whole file, not a running total.
    df["commit_footprint"] = df.groupby("commit_id")["line_number"].transform("count")

    if max_age <= min_age:
        df["score"] = 1.0
    else:
        span = float(max_age - min_age)
        df["score"] = 1.0 - (df["age"] - min_age).astype(float) / span
    return df


def find_age_extremes(score_frame: pd.DataFrame) -> Dict[str, LineExtreme]:
    """
    Picks the oldest and newest line from a score frame.

    Ties resolve to the first line in file order. Returns an empty dict for
    an empty frame.
    """
    if score_frame.empty:
        return {}

    extremes = {}
    for label, idx in (
        ("oldest", score_frame["age"].idxmax()),
        ("newest", score_frame["age"].idxmin()),
    ):
        row = score_frame.loc[idx]
        age = float(row["age"])
        age_days = age / SECONDS_PER_DAY
        extremes[label] = LineExtreme(
            line_number=int(row["line_number"]),
            commit_id=str(row["commit_id"]),
            date=format_timestamp(int(row["timestamp"])),
            age_days=age_days,
            age_years=age_days / DAYS_PER_YEAR,
            score=float(row["score"]),
            commit_footprint=int(row["commit_footprint"]),
        )
    return extremes


def log_age_extremes(extremes: Dict[str, LineExtreme]) -> None:
    """Reports the oldest and newest line through the module logger."""
    for label in ("oldest", "newest"):
        line = extremes.get(label)
        if line is None:
            continue
        logger.info(
            f"{label.capitalize()} line {line.line_number}: "
            f"commit {line.commit_id[:12]} "
            f"on {line.date} ({line.age_days:.1f} days, {line.age_years:.2f} years), "
            f"score {line.score:.3f}, {line.commit_footprint} line(s) from this commit"
        )


def score_blame_records(
    records: List[BlameRecord],
    now: Optional[Union[int, float]] = None,
    report: bool = True,
) -> List[ScoredLine]:
    """
    Scores every blamed line of a file.

    Returns one ScoredLine per record in ascending line order. With `report`
    set, the oldest and newest line are logged; the returned list is the
    same either way.
    """
    if not records:
        return []

    df = build_score_frame(records, now=now)
    scored = [
        ScoredLine(int(line), float(score), int(count))
        for line, score, count in zip(
            df["line_number"], df["score"], df["commit_footprint"]
        )
    ]

    if report:
        log_age_extremes(find_age_extremes(df))
    return scored


# ============================================================================
# COLOR MAPPING
# ============================================================================


def score_to_rgb(score: float) -> Tuple[int, int, int]:
    """
    Maps a recency score to a red (new) to green (old) color.

    Scores outside [0, 1] are clamped and NaN counts as oldest. Channels are
    truncated, so 0.5 gives (127, 127, 0).
    """
    if math.isnan(score):
        score = 0.0
    clamped = min(max(score, 0.0), 1.0)
    red = math.floor(clamped * 255)
    green = math.floor((1.0 - clamped) * 255)
    return red, green, 0


def score_to_hex(score: float) -> str:
    """Same color as score_to_rgb, formatted as '#rrggbb'."""
    return "#{:02x}{:02x}{:02x}".format(*score_to_rgb(score))


def format_footprint_label(count: int, template: str = FOOTPRINT_LABEL) -> str:
    """Annotation text shown after a line, e.g. '  ⟶ 3x'."""
    return template.format(count=count)


# ============================================================================
# VISUALIZATION HELPERS
# ============================================================================


def plot_line_heatmap(
    scored_lines: List[ScoredLine],
    save_path: Optional[str] = None,
    title: str = "Line Recency Heat-Map",
):
    """Draws one bar per line, colored by recency and sized by footprint."""
    if not scored_lines:
        logger.info("No blame data to plot.")
        return

    line_numbers = np.array([s.line_number for s in scored_lines])
    footprints = np.array([s.commit_footprint for s in scored_lines])
    colors = [score_to_hex(s.score) for s in scored_lines]

    fig, ax = plt.subplots(figsize=(10, max(4, len(scored_lines) * 0.2)))
    ax.barh(line_numbers, footprints, color=colors, height=1.0)
    ax.invert_yaxis()
    ax.set_title(title)
    ax.set_xlabel("Lines From Same Commit")
    ax.set_ylabel("Line Number")
    ax.grid(axis="x", linestyle="--", linewidth=0.5)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def format_timestamp(timestamp: int, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Formats epoch seconds as a UTC date string."""
    return format_date(datetime.fromtimestamp(timestamp, tz=timezone.utc), format_str)


def format_date(date_obj, format_str: str = "%Y-%m-%d") -> str:
    """Formats datetime objects consistently."""
    return date_obj.strftime(format_str)
