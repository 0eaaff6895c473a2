"""
Live HTML preview of a document snapshot.

PreviewRenderer is pure: the same snapshot always yields the same markup. Section
and entry selection comes from the document context's selection module, which the
exporter shares, so the preview and the export never disagree on content.

Templates live next to this module (templates/*.jinja). Autoescape is off; every
user-supplied value is piped through escape_content or escape_attr explicitly.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from vitae.contexts.document.modules import CONTACT_ICONS
from vitae.contexts.document.selection import (
    contact_items,
    format_date_range,
    has_profile_content,
    header_parts,
    profile_of,
    select_sections,
)
from vitae.contexts.rendering.escaping import escape_attr, escape_html

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
PREVIEW_TEMPLATE = "preview.html.jinja"
PAGE_TEMPLATE = "page.html.jinja"

EMPTY_STATE_HTML = (
    '<div class="resume-empty-tip">\n'
    "  <p>👈 请在左侧填写简历内容</p>\n"
    "  <p>右侧将实时显示简历效果</p>\n"
    "</div>\n"
)


class PreviewRenderer:
    """
    Renders snapshots to HTML through Jinja2 templates.

    Args:
        templates_dir: Directory holding preview.html.jinja and page.html.jinja.
                       Defaults to the templates shipped with the package.
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = Path(templates_dir) if templates_dir else TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["escape_content"] = escape_html
        self.env.filters["escape_attr"] = escape_attr
        self._cache: Dict[str, Template] = {}

    def get_template(self, name: str) -> Template:
        """Load a template by file name, caching it."""
        if name not in self._cache:
            self._cache[name] = self.env.get_template(name)
        return self._cache[name]

    def render(self, snapshot: Mapping[str, Any]) -> str:
        """
        Render the preview fragment for a snapshot.

        Args:
            snapshot: Document snapshot (DocumentModel.snapshot())

        Returns:
            HTML fragment, or "" when the profile has no name, job title,
            phone or email (callers show EMPTY_STATE_HTML instead)
        """
        profile = profile_of(snapshot)
        if not has_profile_content(profile):
            return ""

        return self.get_template(PREVIEW_TEMPLATE).render(**build_preview_context(snapshot))

    def render_page(self, snapshot: Mapping[str, Any]) -> str:
        """Render a standalone HTML page, falling back to the empty-state placeholder."""
        body = self.render(snapshot) or EMPTY_STATE_HTML
        title = profile_of(snapshot).get("name") or "简历预览"
        return self.get_template(PAGE_TEMPLATE).render(title=title, body=body)


def build_preview_context(snapshot: Mapping[str, Any]) -> Dict[str, Any]:
    """Template variables for the preview fragment (values still unescaped)."""
    profile = profile_of(snapshot)

    sections: List[Dict[str, Any]] = []
    for section in select_sections(snapshot):
        view: Dict[str, Any] = {
            "module": section.module.value,
            "title": section.title,
            "entries": [],
            "text": section.text,
        }
        if section.module.is_repeatable:
            schema = section.module.schema
            view["entries"] = [
                {
                    "header": header_parts(entry, schema),
                    "dates": format_date_range(entry.get("startDate"), entry.get("endDate")),
                    "desc": entry.get("desc", ""),
                }
                for entry in section.entries
            ]
        sections.append(view)

    return {
        "photo": profile.get("photo", ""),
        "name": profile.get("name", ""),
        "job_title": profile.get("jobTitle", ""),
        "contacts": [(CONTACT_ICONS[key], value) for key, value in contact_items(profile)],
        "sections": sections,
    }


@lru_cache(maxsize=1)
def _default_renderer() -> PreviewRenderer:
    return PreviewRenderer()


def render_preview(snapshot: Mapping[str, Any]) -> str:
    """Render a preview fragment with the packaged templates."""
    return _default_renderer().render(snapshot)


def render_preview_page(snapshot: Mapping[str, Any]) -> str:
    """Render a standalone preview page with the packaged templates."""
    return _default_renderer().render_page(snapshot)
