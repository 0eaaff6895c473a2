"""
Encode an ExportDocument as a .docx file with python-docx.

python-docx is imported lazily so that preview-only use never loads it; a missing
or failing library is reported as ExportUnavailable and the caller's document
model is never involved.
"""

import time
from pathlib import Path

from vitae.contexts.rendering.logger import _log_error, log_export_result
from vitae.contexts.rendering.structure import (
    Alignment,
    BorderSpec,
    ExportDocument,
    ExportParagraph,
    ExportRun,
)
from vitae.exceptions import ExportUnavailable

# Page width of the python-docx default template (US Letter)
PAGE_WIDTH_IN = 8.5


def write_docx(document: ExportDocument, destination: Path) -> Path:
    """
    Write an export document to disk.

    Args:
        document: Structure produced by export_document()
        destination: Target file path, or a directory (document.filename is used)

    Returns:
        Path of the written file

    Raises:
        ExportUnavailable: If python-docx is unavailable or fails to encode/save
    """
    start = time.perf_counter()
    destination = Path(destination)
    if destination.is_dir():
        destination = destination / document.filename

    try:
        from docx import Document
        from docx.shared import Inches
    except ImportError as e:
        raise ExportUnavailable("Word export requires python-docx; install python-docx", e) from e

    try:
        doc = Document()
        for section in doc.sections:
            section.top_margin = Inches(document.margin_in)
            section.bottom_margin = Inches(document.margin_in)
            section.left_margin = Inches(document.margin_in)
            section.right_margin = Inches(document.margin_in)

        text_width = Inches(PAGE_WIDTH_IN - 2 * document.margin_in)
        for paragraph in document.paragraphs:
            _add_paragraph(doc, paragraph, text_width)

        destination.parent.mkdir(parents=True, exist_ok=True)
        doc.save(str(destination))
    except (OSError, ValueError, KeyError) as e:
        _log_error(f"Failed to write {destination}: {e}")
        raise ExportUnavailable(f"Could not write Word document to {destination}", e) from e

    log_export_result(destination, len(document.paragraphs), time.perf_counter() - start)
    return destination


def _add_paragraph(doc, spec: ExportParagraph, text_width) -> None:
    from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT
    from docx.shared import Pt

    paragraph = doc.add_paragraph()
    # w:pBdr precedes w:tabs, w:spacing and w:jc in w:pPr, so it goes in first
    if spec.bottom_border is not None:
        _set_bottom_border(paragraph, spec.bottom_border)

    fmt = paragraph.paragraph_format
    fmt.space_before = Pt(spec.space_before_pt)
    fmt.space_after = Pt(spec.space_after_pt)
    if spec.alignment == Alignment.CENTER:
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER

    if spec.right_tab:
        fmt.tab_stops.add_tab_stop(text_width, WD_TAB_ALIGNMENT.RIGHT)

    for run_spec in spec.runs:
        _add_run(paragraph, run_spec)


def _add_run(paragraph, spec: ExportRun) -> None:
    from docx.oxml.ns import qn
    from docx.shared import Pt, RGBColor

    run = paragraph.add_run(spec.text)
    run.bold = spec.bold
    run.font.size = Pt(spec.size_pt)
    run.font.name = spec.font
    # CJK text uses the eastAsia font slot, which font.name does not set
    run._element.get_or_add_rPr().get_or_add_rFonts().set(qn("w:eastAsia"), spec.font)
    if spec.color:
        run.font.color.rgb = RGBColor.from_string(spec.color)


def _set_bottom_border(paragraph, border: BorderSpec) -> None:
    from docx.oxml import OxmlElement
    from docx.oxml.ns import qn

    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), str(border.size))
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), border.color)
    p_bdr.append(bottom)
    p_pr.append(p_bdr)
