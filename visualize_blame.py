#!/usr/bin/env python3
"""
Blame Heat Visualizer

Colors every line of a file by how recently it was last changed (red = new,
green = old) and annotates it with the number of lines in the file that came
from the same commit.

Examples:
  python visualize_blame.py src/app.py
  python visualize_blame.py src/app.py --plot app-heat.png
  python visualize_blame.py src/app.py --rev v1.2.0 --now 1700000000
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Optional

from blame_data import parse_line_porcelain
from heat_presenter import (
    DEFAULT_NAMESPACE,
    AnnotatedDocument,
    HeatmapPresenter,
    render_text,
)
from heatutils import (
    FOOTPRINT_LABEL,
    BlameUnavailableError,
    fetch_blame_text,
    format_footprint_label,
    plot_line_heatmap,
    score_blame_records,
    score_to_hex,
)

logger = logging.getLogger(__name__)


@dataclass
class BlameHeatConfig:
    """Settings for one visualization run."""
    namespace: str = DEFAULT_NAMESPACE
    annotation_template: str = FOOTPRINT_LABEL
    reference_time: Optional[int] = None  # None = now
    rev: Optional[str] = None  # None = working tree
    plot_path: Optional[str] = None


@dataclass
class VisualizeResult:
    """Outcome of a visualize call."""
    path: str
    available: bool
    lines_highlighted: int = 0
    message: str = ""


def visualize(
    document: AnnotatedDocument,
    presenter: HeatmapPresenter,
    config: Optional[BlameHeatConfig] = None,
) -> VisualizeResult:
    """
    Fetches blame for the document's file and paints the heat-map onto it.

    When no blame is available the document is left untouched and the
    result carries a notice instead.
    """
    config = config or BlameHeatConfig()

    try:
        raw_text = fetch_blame_text(document.path, rev=config.rev)
    except BlameUnavailableError as e:
        logger.debug(f"Blame fetch failed: {e}")
        raw_text = ""

    if not raw_text:
        message = f"Blame data is not available for {document.path}"
        logger.info(message)
        return VisualizeResult(document.path, available=False, message=message)

    records = parse_line_porcelain(raw_text)
    scored = score_blame_records(records, now=config.reference_time)

    presenter.clear(document)
    highlighted = 0
    for line in scored:
        color = score_to_hex(line.score)
        label = format_footprint_label(
            line.commit_footprint, config.annotation_template
        )
        if presenter.highlight(document, line.line_number, color, label):
            highlighted += 1

    if config.plot_path:
        plot_line_heatmap(scored, save_path=config.plot_path, title=document.path)

    message = f"Highlighted {highlighted} line(s) in {document.path}"
    logger.info(message)
    return VisualizeResult(
        document.path, available=True, lines_highlighted=highlighted, message=message
    )


def clear(document: AnnotatedDocument, presenter: HeatmapPresenter) -> int:
    """Removes every heat annotation this presenter placed on the document."""
    removed = presenter.clear(document)
    logger.debug(f"Cleared {removed} annotation(s) from {document.path}")
    return removed


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Color a file's lines by blame recency and commit footprint.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("file_path", help="Path to a file inside a Git repository.")
    parser.add_argument(
        "-p",
        "--plot",
        dest="plot_path",
        default=None,
        help="Save a heat-map image to this path.",
    )
    parser.add_argument(
        "-r",
        "--rev",
        default=None,
        help="Blame the file as of this revision instead of the working tree.",
    )
    parser.add_argument(
        "--namespace",
        default=DEFAULT_NAMESPACE,
        help="Annotation namespace used by the presenter.",
    )
    parser.add_argument(
        "--now",
        type=int,
        default=None,
        help="Reference time in epoch seconds (defaults to the current time).",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Command-line interface for the blame heat visualizer."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    config = BlameHeatConfig(
        namespace=args.namespace,
        reference_time=args.now,
        rev=args.rev,
        plot_path=args.plot_path,
    )

    try:
        document = AnnotatedDocument.from_file(args.file_path)
        presenter = HeatmapPresenter(namespace=config.namespace)
        result = visualize(document, presenter, config)
        if result.available:
            print(render_text(document, namespace=config.namespace))
        return 0
    except Exception as e:
        logging.error(f"An unexpected error occurred: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
