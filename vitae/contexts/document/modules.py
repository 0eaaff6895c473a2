"""
Résumé module definitions.

A module is one named logical section of the résumé other than the fixed profile
header. The set is closed: every renderer branches on a module's content shape
(repeatable entries vs. a single text block), so adding a module kind means adding
an enum member plus its schema here.

Wire keys (profile fields, entry fields, text content keys) match the persisted
snapshot format and are kept camelCase for compatibility with saved data.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class Module(str, Enum):
    """Closed set of résumé modules, in canonical default order."""

    EDUCATION = "education"
    EXPERIENCE = "experience"
    PROJECTS = "projects"
    SKILLS = "skills"
    SUMMARY = "summary"
    AWARDS = "awards"

    @classmethod
    def parse(cls, value: Union["Module", str, None]) -> Optional["Module"]:
        """Return the module for an identifier, or None if it is not a module."""
        if isinstance(value, Module):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None

    @property
    def section_title(self) -> str:
        """Heading used in preview and export (e.g., '教育背景')."""
        return SECTION_TITLES[self]

    @property
    def display_label(self) -> str:
        """Label with icon, used when listing visible and hidden modules."""
        return DISPLAY_LABELS[self]

    @property
    def is_repeatable(self) -> bool:
        """Whether the module holds an ordered list of entries."""
        return self in ENTRY_SCHEMAS

    @property
    def schema(self) -> "EntrySchema":
        """Entry schema of a repeatable module (KeyError for text modules)."""
        return ENTRY_SCHEMAS[self]

    @property
    def content_key(self) -> str:
        """Snapshot key of a text module's content (KeyError for repeatable modules)."""
        return TEXT_CONTENT_KEYS[self]


CANONICAL_ORDER: Tuple[Module, ...] = tuple(Module)

SECTION_TITLES = {
    Module.EDUCATION: "教育背景",
    Module.EXPERIENCE: "工作经历",
    Module.PROJECTS: "项目经历",
    Module.SKILLS: "专业技能",
    Module.SUMMARY: "自我评价",
    Module.AWARDS: "荣誉证书",
}

DISPLAY_LABELS = {
    Module.EDUCATION: "🎓 教育背景",
    Module.EXPERIENCE: "💼 工作经历",
    Module.PROJECTS: "🚀 项目经历",
    Module.SKILLS: "🛠 专业技能",
    Module.SUMMARY: "✨ 自我评价",
    Module.AWARDS: "🏆 荣誉证书",
}


@dataclass(frozen=True)
class EntrySchema:
    """
    Shape of one repeatable entry type.

    Attributes:
        fields: All entry keys, in form order
        primary: Primary identifying field (school/company/projectName)
        secondary: Secondary identifying field (major/position/role)
        header_fields: Fields joined into the entry header line, in order
        field_labels: Human-readable field labels (used for rewrite context labels)
    """

    fields: Tuple[str, ...]
    primary: str
    secondary: str
    header_fields: Tuple[str, ...]
    field_labels: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def blank(self) -> Dict[str, str]:
        """Return a new entry with every field empty."""
        return {key: "" for key in self.fields}


ENTRY_SCHEMAS: Dict[Module, EntrySchema] = {
    Module.EDUCATION: EntrySchema(
        fields=("school", "major", "degree", "startDate", "endDate", "desc"),
        primary="school",
        secondary="major",
        header_fields=("school", "major", "degree"),
        field_labels={
            "school": "学校名称",
            "major": "专业",
            "degree": "学历",
            "startDate": "开始时间",
            "endDate": "结束时间",
            "desc": "补充描述",
        },
    ),
    Module.EXPERIENCE: EntrySchema(
        fields=("company", "position", "startDate", "endDate", "desc"),
        primary="company",
        secondary="position",
        header_fields=("company", "position"),
        field_labels={
            "company": "公司名称",
            "position": "职位",
            "startDate": "开始时间",
            "endDate": "结束时间",
            "desc": "工作描述",
        },
    ),
    Module.PROJECTS: EntrySchema(
        fields=("projectName", "role", "startDate", "endDate", "desc"),
        primary="projectName",
        secondary="role",
        header_fields=("projectName", "role"),
        field_labels={
            "projectName": "项目名称",
            "role": "担任角色",
            "startDate": "开始时间",
            "endDate": "结束时间",
            "desc": "项目描述",
        },
    ),
}

TEXT_CONTENT_KEYS: Dict[Module, str] = {
    Module.SKILLS: "skillsContent",
    Module.SUMMARY: "summaryContent",
    Module.AWARDS: "awardsContent",
}

PROFILE_SECTION = "profile"
PROFILE_FIELDS: Tuple[str, ...] = (
    "name",
    "jobTitle",
    "phone",
    "email",
    "city",
    "birthday",
    "website",
    "photo",
)

# Contact fields in display order, with the icon shown in the preview
CONTACT_FIELDS: Tuple[str, ...] = ("phone", "email", "city", "birthday", "website")
CONTACT_ICONS = {
    "phone": "📱",
    "email": "✉️",
    "city": "📍",
    "birthday": "🎂",
    "website": "🔗",
}

# Any of these being set means the profile has meaningful content
HEADER_PRESENCE_FIELDS: Tuple[str, ...] = ("name", "jobTitle", "phone", "email")

_FIELD_PATH = re.compile(r"^([A-Za-z]+)(?:\[(\d+)\])?(?:\.([A-Za-z]+))?$")


@dataclass(frozen=True)
class FieldRef:
    """
    Address of one editable field, as sent by the UI with every write event.

    Attributes:
        section: "profile" or a module identifier
        field: Profile key or entry key (unused for text modules)
        index: Entry index for repeatable modules

    Examples:
        FieldRef("profile", "name")
        FieldRef("experience", "desc", index=0)
        FieldRef("summary")
    """

    section: str
    field: str = ""
    index: Optional[int] = None

    @property
    def module(self) -> Optional[Module]:
        """Module addressed by this reference (None for profile or unknown sections)."""
        return Module.parse(self.section)

    @classmethod
    def parse(cls, path: str) -> Optional["FieldRef"]:
        """
        Parse a compact path as produced by describe().

        Examples:
            'profile.name'       -> FieldRef("profile", "name")
            'experience[0].desc' -> FieldRef("experience", "desc", 0)
            'summary'            -> FieldRef("summary")

        Returns:
            FieldRef, or None if the path is not well-formed
        """
        match = _FIELD_PATH.match(path.strip())
        if match is None:
            return None
        section, index, field_name = match.groups()
        return cls(section, field_name or "", int(index) if index is not None else None)

    def describe(self) -> str:
        """Compact path used in log messages (e.g., 'experience[0].desc')."""
        if self.index is not None:
            return f"{self.section}[{self.index}].{self.field}"
        if self.field:
            return f"{self.section}.{self.field}"
        return self.section
