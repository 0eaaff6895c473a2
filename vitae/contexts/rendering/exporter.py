"""
Document exporter: snapshot -> ExportDocument.

Produces the paginated résumé structure (header, horizontal rule, one titled
section per visible module) without touching any encoding library. Content
selection is shared with the preview through vitae.contexts.document.selection.

Layout:
    Name                        16pt bold, centered
    Job title                   11pt #555555, centered (if set)
    phone  |  email  |  city    9pt #666666, centered (if any contact set)
    ─────────────────────────   horizontal rule
    Section title               12pt bold, bottom border
    School · Major · Degree <tab> 2019.09 - 2023.06
    Description line            9pt, one paragraph per line
"""

import re
from typing import Any, List, Mapping

from vitae.contexts.document.selection import (
    SelectedSection,
    contact_items,
    description_lines,
    format_date_range,
    header_parts,
    profile_of,
    select_sections,
)
from vitae.contexts.rendering.logger import _log_debug
from vitae.contexts.rendering.structure import (
    Alignment,
    BorderSpec,
    ExportDocument,
    ExportParagraph,
    ExportRun,
)
from vitae.exceptions import MissingRequiredField

CONTACT_SEPARATOR = "  |  "
HEADER_SEPARATOR = " · "
FILENAME_SUFFIX = "_简历.docx"

NAME_SIZE = 16
JOB_TITLE_SIZE = 11
CONTACT_SIZE = 9
SECTION_TITLE_SIZE = 12
ENTRY_HEADER_SIZE = 10
DATE_SIZE = 9
BODY_SIZE = 9

JOB_TITLE_COLOR = "555555"
CONTACT_COLOR = "666666"
DATE_COLOR = "888888"

RULE_BORDER = BorderSpec(size=6)
SECTION_BORDER = BorderSpec(size=3)

# Characters that cannot appear in a file name on common filesystems
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def export_document(snapshot: Mapping[str, Any]) -> ExportDocument:
    """
    Build the export document for a snapshot.

    Args:
        snapshot: Document snapshot (DocumentModel.snapshot())

    Returns:
        ExportDocument ready for write_docx()

    Raises:
        MissingRequiredField: If profile.name is empty (checked before any work)
    """
    profile = profile_of(snapshot)
    name = profile.get("name") or ""
    if not name:
        raise MissingRequiredField("profile.name", "Fill in at least a name before exporting")

    paragraphs = _header_paragraphs(profile)
    sections = select_sections(snapshot)
    for section in sections:
        paragraphs.extend(_section_paragraphs(section))

    _log_debug(f"Built export document: {len(sections)} sections, {len(paragraphs)} paragraphs")
    return ExportDocument(paragraphs=paragraphs, filename=export_filename(name))


def export_filename(name: str) -> str:
    """Artifact file name for a profile name, with path separators removed."""
    safe = _UNSAFE_FILENAME_CHARS.sub("", name).strip().strip(".")
    return f"{safe or 'resume'}{FILENAME_SUFFIX}"


def _header_paragraphs(profile: Mapping[str, str]) -> List[ExportParagraph]:
    paragraphs = [
        ExportParagraph(
            runs=[ExportRun(profile["name"], bold=True, size_pt=NAME_SIZE)],
            alignment=Alignment.CENTER,
            space_after_pt=5,
        )
    ]

    if profile.get("jobTitle"):
        paragraphs.append(
            ExportParagraph(
                runs=[ExportRun(profile["jobTitle"], size_pt=JOB_TITLE_SIZE, color=JOB_TITLE_COLOR)],
                alignment=Alignment.CENTER,
                space_after_pt=5,
            )
        )

    contacts = [value for _, value in contact_items(profile)]
    if contacts:
        paragraphs.append(
            ExportParagraph(
                runs=[
                    ExportRun(
                        CONTACT_SEPARATOR.join(contacts), size_pt=CONTACT_SIZE, color=CONTACT_COLOR
                    )
                ],
                alignment=Alignment.CENTER,
                space_after_pt=10,
            )
        )

    # Horizontal rule
    paragraphs.append(ExportParagraph(bottom_border=RULE_BORDER, space_after_pt=10))
    return paragraphs


def _section_paragraphs(section: SelectedSection) -> List[ExportParagraph]:
    paragraphs = [
        ExportParagraph(
            runs=[ExportRun(section.title, bold=True, size_pt=SECTION_TITLE_SIZE)],
            space_before_pt=10,
            space_after_pt=5,
            bottom_border=SECTION_BORDER,
        )
    ]

    if not section.module.is_repeatable:
        paragraphs.extend(_body_paragraphs(section.text))
        return paragraphs

    schema = section.module.schema
    for entry in section.entries:
        runs = [
            ExportRun(
                HEADER_SEPARATOR.join(header_parts(entry, schema)),
                bold=True,
                size_pt=ENTRY_HEADER_SIZE,
            )
        ]
        dates = format_date_range(entry.get("startDate"), entry.get("endDate"))
        if dates:
            runs.append(ExportRun(f"\t{dates}", size_pt=DATE_SIZE, color=DATE_COLOR))

        paragraphs.append(ExportParagraph(runs=runs, space_before_pt=4, right_tab=bool(dates)))
        paragraphs.extend(_body_paragraphs(entry.get("desc")))

    return paragraphs


def _body_paragraphs(text: str) -> List[ExportParagraph]:
    return [
        ExportParagraph(runs=[ExportRun(line, size_pt=BODY_SIZE)], space_before_pt=1)
        for line in description_lines(text)
    ]
