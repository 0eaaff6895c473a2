"""
Repeatable entry management (education, experience, projects).

All operations are forgiving: invalid module types, indices or fields are silent
no-ops, matching the UI's double-click-safe semantics.
"""

from typing import Optional, Union

from vitae.contexts.document.document_model import DocumentModel
from vitae.contexts.document.logger import _log_debug
from vitae.contexts.document.modules import Module

ModuleLike = Union[Module, str]


class ItemCollectionManager:
    """CRUD over the repeatable entry collections of one DocumentModel."""

    def __init__(self, model: DocumentModel):
        self.model = model

    def add(self, module: ModuleLike) -> Optional[int]:
        """
        Append a blank entry.

        Args:
            module: Repeatable module identifier

        Returns:
            Index of the new entry, or None if the module is not repeatable
        """
        resolved = _repeatable(module)
        if resolved is None:
            _log_debug(f"add: '{module}' is not a repeatable module")
            return None

        collection = self.model.collection(resolved)
        collection.append(resolved.schema.blank())
        self.model.notify_changed()
        return len(collection) - 1

    def remove(self, module: ModuleLike, index: int) -> bool:
        """
        Remove the entry at index.

        Returns:
            True if an entry was removed; False for empty collections or invalid input
        """
        resolved = _repeatable(module)
        if resolved is None:
            return False

        collection = self.model.collection(resolved)
        if not _valid_index(collection, index):
            _log_debug(f"remove: no entry {resolved.value}[{index}]")
            return False

        del collection[index]
        self.model.notify_changed()
        return True

    def set_field(self, module: ModuleLike, index: int, field: str, value: Optional[str]) -> bool:
        """
        Update one field of one entry in place.

        Returns:
            True if the field was written; False for invalid module, index or field
        """
        resolved = _repeatable(module)
        if resolved is None or field not in resolved.schema.fields:
            return False

        collection = self.model.collection(resolved)
        if not _valid_index(collection, index):
            return False

        collection[index][field] = "" if value is None else str(value)
        self.model.notify_changed()
        return True


def _repeatable(module: ModuleLike) -> Optional[Module]:
    resolved = Module.parse(module)
    if resolved is None or not resolved.is_repeatable:
        return None
    return resolved


def _valid_index(collection: list, index: int) -> bool:
    # bool is an int subclass but never a valid entry index
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(collection)
