"""
Annotated documents and the presenter that paints blame heat onto them.

A document holds the text of one file plus any number of line annotations.
Each annotation belongs to a namespace, so several tools can decorate the
same document and each can clear only what it placed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

DEFAULT_NAMESPACE = "blame_heat"


@dataclass(frozen=True)
class Annotation:
    """A color and inline text attached to one line of a document."""
    line_number: int
    color: str
    text: str
    namespace: str


@dataclass
class AnnotatedDocument:
    """Text of one file and the annotations currently placed on it."""
    path: str
    lines: List[str] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)

    @classmethod
    def from_file(cls, path: str) -> "AnnotatedDocument":
        """Reads a file from disk; a missing file gives an empty document."""
        file_path = Path(path)
        if not file_path.is_file():
            return cls(path=str(path))
        text = file_path.read_text(encoding="utf-8", errors="replace")
        return cls(path=str(path), lines=text.splitlines())

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def annotations_in(self, namespace: str) -> List[Annotation]:
        return [a for a in self.annotations if a.namespace == namespace]


class HeatmapPresenter:
    """Places and removes heat annotations under a single namespace."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace
        self.logger = logging.getLogger(self.__class__.__name__)

    def highlight(
        self, document: AnnotatedDocument, line_number: int, color: str, text: str
    ) -> bool:
        """
        Annotates one line. Returns False when the line is outside the document.

        An empty document (text not loaded) accepts any positive line number.
        """
        if line_number < 1 or (document.lines and line_number > document.line_count):
            self.logger.debug(
                f"Line {line_number} is outside {document.path}; not highlighted"
            )
            return False
        document.annotations.append(
            Annotation(line_number, color, text, self.namespace)
        )
        return True

    def clear(self, document: AnnotatedDocument) -> int:
        """Removes this presenter's annotations and returns how many were removed."""
        kept = [a for a in document.annotations if a.namespace != self.namespace]
        removed = len(document.annotations) - len(kept)
        document.annotations = kept
        return removed

    def annotations(self, document: AnnotatedDocument) -> List[Annotation]:
        own = document.annotations_in(self.namespace)
        return sorted(own, key=lambda a: a.line_number)


def render_text(document: AnnotatedDocument, namespace: str = DEFAULT_NAMESPACE) -> str:
    """
    Renders the document as a numbered listing with heat annotations.

    Annotated lines carry their color and label; other lines are printed
    as-is. When the text was not loaded, only the annotations are listed.
    """
    by_line = {a.line_number: a for a in document.annotations_in(namespace)}
    line_numbers = (
        range(1, document.line_count + 1) if document.lines else sorted(by_line)
    )
    width = len(str(max(line_numbers, default=0)))

    output = []
    for number in line_numbers:
        content = document.lines[number - 1] if document.lines else ""
        annotation = by_line.get(number)
        if annotation:
            output.append(
                f"{number:>{width}} {annotation.color} | {content}{annotation.text}"
            )
        else:
            output.append(f"{number:>{width}} {'':7} | {content}")
    return "\n".join(output)
