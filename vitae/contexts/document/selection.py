"""
Content selection shared by the preview and export renderers.

Both renderers decide what to show exclusively through this module, so the preview
and the exported document always contain the same sections and entries.

Rules:
- The profile has content when any of name, job title, phone or email is set
- An entry is meaningful when its primary (school/company/projectName) or
  secondary (major/position/role) field is set
- A repeatable module is empty when none of its entries is meaningful
- A text module is empty when its content is empty
- Sections follow moduleOrder; deleted modules are skipped even if listed
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from vitae.contexts.document.defaults import DELETED_KEY, ORDER_KEY, PROFILE_KEY
from vitae.contexts.document.modules import (
    CONTACT_FIELDS,
    HEADER_PRESENCE_FIELDS,
    EntrySchema,
    Module,
)

DATE_SEPARATOR = " - "


@dataclass(frozen=True)
class SelectedSection:
    """
    One non-empty section chosen for rendering.

    Attributes:
        module: Module the section renders
        entries: Meaningful entries, in insertion order (repeatable modules)
        text: Raw content (text modules)
    """

    module: Module
    entries: Tuple[Dict[str, str], ...] = ()
    text: str = ""

    @property
    def title(self) -> str:
        return self.module.section_title


def has_profile_content(profile: Mapping[str, Any]) -> bool:
    """Whether the profile holds anything worth rendering a header for."""
    return any(profile.get(key) for key in HEADER_PRESENCE_FIELDS)


def contact_items(profile: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """Non-empty (field, value) contact pairs in display order."""
    return [(key, profile[key]) for key in CONTACT_FIELDS if profile.get(key)]


def entry_is_meaningful(entry: Mapping[str, Any], schema: EntrySchema) -> bool:
    return bool(entry.get(schema.primary)) or bool(entry.get(schema.secondary))


def header_parts(entry: Mapping[str, Any], schema: EntrySchema) -> List[str]:
    """Present header fields of an entry (e.g., [school, major, degree])."""
    return [entry[key] for key in schema.header_fields if entry.get(key)]


def format_date_range(start: Optional[str], end: Optional[str]) -> str:
    """
    Format an entry's date range.

    Returns start, then ' - end' when end is set; empty when start is absent.
    """
    if not start:
        return ""
    if end:
        return f"{start}{DATE_SEPARATOR}{end}"
    return start


def description_lines(text: Optional[str]) -> List[str]:
    """Split free text into lines, preserving the user's line breaks."""
    if not text:
        return []
    return text.splitlines()


def select_section(snapshot: Mapping[str, Any], module: Module) -> Optional[SelectedSection]:
    """Select a module's renderable content, or None if the module is empty."""
    if module.is_repeatable:
        schema = module.schema
        entries = tuple(
            dict(entry)
            for entry in snapshot.get(module.value) or []
            if entry_is_meaningful(entry, schema)
        )
        return SelectedSection(module, entries=entries) if entries else None

    text = snapshot.get(module.content_key) or ""
    return SelectedSection(module, text=text) if text else None


def select_sections(snapshot: Mapping[str, Any]) -> List[SelectedSection]:
    """
    Select every non-empty, non-deleted section in module order.

    Args:
        snapshot: Document snapshot (DocumentModel.snapshot())

    Returns:
        Sections to render, in display order
    """
    deleted = {Module.parse(name) for name in snapshot.get(DELETED_KEY) or []}
    sections = []
    for name in snapshot.get(ORDER_KEY) or []:
        module = Module.parse(name)
        if module is None or module in deleted:
            continue
        section = select_section(snapshot, module)
        if section is not None:
            sections.append(section)
    return sections


def profile_of(snapshot: Mapping[str, Any]) -> Dict[str, str]:
    """Profile record of a snapshot (empty dict if absent)."""
    return dict(snapshot.get(PROFILE_KEY) or {})
