"""
Library-independent export document structure.

The exporter produces these plain dataclasses; docx_writer encodes them. Keeping
the structure separate lets tests inspect exactly what will be written without
opening a .docx file.

Sizes are in points, colors are 6-digit hex strings without '#'.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

DEFAULT_FONT = "Microsoft YaHei"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"


@dataclass(frozen=True)
class ExportRun:
    """A run of uniformly formatted text."""

    text: str
    bold: bool = False
    size_pt: float = 9
    color: Optional[str] = None
    font: str = DEFAULT_FONT


@dataclass(frozen=True)
class BorderSpec:
    """
    Paragraph bottom border.

    Attributes:
        size: Border width in eighths of a point (w:sz)
        color: Hex color
    """

    size: int
    color: str = "000000"


@dataclass
class ExportParagraph:
    """
    One paragraph of the export document.

    Attributes:
        runs: Text runs, in order (may be empty, e.g., for a horizontal rule)
        alignment: Paragraph alignment
        space_before_pt: Spacing before the paragraph
        space_after_pt: Spacing after the paragraph
        bottom_border: Bottom border, if any
        right_tab: Whether the paragraph has a right-aligned tab stop at the
                   right margin (used to push entry dates to the right edge)
    """

    runs: List[ExportRun] = field(default_factory=list)
    alignment: Alignment = Alignment.LEFT
    space_before_pt: float = 0
    space_after_pt: float = 0
    bottom_border: Optional[BorderSpec] = None
    right_tab: bool = False

    @property
    def text(self) -> str:
        """Concatenated text of all runs."""
        return "".join(run.text for run in self.runs)


@dataclass
class ExportDocument:
    """
    Complete export document.

    Attributes:
        paragraphs: Body paragraphs in order
        filename: Suggested artifact file name (e.g., '张三_简历.docx')
        margin_in: Page margin on all four sides, in inches
    """

    paragraphs: List[ExportParagraph]
    filename: str
    margin_in: float = 0.5

    @property
    def text(self) -> str:
        """Plain text of the document, one paragraph per line."""
        return "\n".join(paragraph.text for paragraph in self.paragraphs)
