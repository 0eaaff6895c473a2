"""
Document Model

Canonical in-memory state of one résumé: profile, module order, deleted-module set,
repeatable entry collections and text module contents.

The model is mutated only through:
- set() for profile and text-module fields
- ItemCollectionManager for repeatable entries
- ModuleLifecycleController for order and deletion
- replace() for load and reset

Every effective mutation notifies subscribers exactly once; renderers and the save
scheduler hang off that notification (see contexts/editing/session.py).
"""

import copy
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Tuple

from vitae.contexts.document.defaults import (
    DELETED_KEY,
    ORDER_KEY,
    PROFILE_KEY,
    SNAPSHOT_KEYS,
    get_default_snapshot,
)
from vitae.contexts.document.logger import _log_debug, log_snapshot_repairs
from vitae.contexts.document.modules import (
    CANONICAL_ORDER,
    ENTRY_SCHEMAS,
    PROFILE_FIELDS,
    TEXT_CONTENT_KEYS,
    EntrySchema,
    Module,
)

Observer = Callable[["DocumentModel"], None]


class DocumentModel:
    """
    In-memory résumé document.

    Field paths accepted by get()/set() are dotted wire keys:
    'profile.<field>' for profile fields and 'skillsContent', 'summaryContent',
    'awardsContent' for text modules. Unknown paths are ignored.
    """

    def __init__(self, snapshot: Optional[Mapping] = None):
        self._observers: List[Observer] = []
        self._state: Dict[str, Any] = get_default_snapshot()
        self._extras: Dict[str, Any] = {}
        if snapshot is not None:
            self._state, self._extras = merge_snapshot(snapshot)

    # --- Change notification ---

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """
        Register a change callback.

        Args:
            callback: Called with the model after every effective mutation

        Returns:
            Function that removes the callback
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def notify_changed(self) -> None:
        """Invoke every subscriber with this model."""
        for callback in list(self._observers):
            callback(self)

    # --- Field access ---

    def get(self, path: str) -> Optional[str]:
        """Return the value at a field path, or None for unknown paths."""
        target = self._resolve(path)
        if target is None:
            return None
        container, key = target
        return container[key]

    def set(self, path: str, value: Optional[str]) -> bool:
        """
        Set a profile or text-module field.

        Args:
            path: Field path (e.g., 'profile.name', 'summaryContent')
            value: New value (None is stored as empty string)

        Returns:
            True if the path was known and the model changed, False if ignored
        """
        target = self._resolve(path)
        if target is None:
            _log_debug(f"Ignoring write to unknown path '{path}'")
            return False
        container, key = target
        container[key] = "" if value is None else str(value)
        self.notify_changed()
        return True

    def _resolve(self, path: str) -> Optional[Tuple[Dict[str, Any], str]]:
        section, _, field = str(path).partition(".")
        if section == PROFILE_KEY and field in PROFILE_FIELDS:
            return self._state[PROFILE_KEY], field
        if not field and section in TEXT_CONTENT_KEYS.values():
            return self._state, section
        return None

    @property
    def profile(self) -> Dict[str, str]:
        """Copy of the profile record."""
        return dict(self._state[PROFILE_KEY])

    def text(self, module: Module) -> str:
        """Content of a text module."""
        return self._state[TEXT_CONTENT_KEYS[module]]

    def entries(self, module: Module) -> List[Dict[str, str]]:
        """Copies of a repeatable module's entries, in insertion order."""
        return copy.deepcopy(self._state[module.value])

    def collection(self, module: Module) -> List[Dict[str, str]]:
        """
        Live entry list of a repeatable module.

        Only ItemCollectionManager mutates this list; it calls notify_changed() itself.
        """
        return self._state[module.value]

    # --- Module partition ---

    @property
    def module_order(self) -> List[Module]:
        """Active modules in display order."""
        return [Module(name) for name in self._state[ORDER_KEY]]

    @property
    def deleted_modules(self) -> List[Module]:
        """Modules currently hidden, in deletion order."""
        return [Module(name) for name in self._state[DELETED_KEY]]

    def set_module_partition(self, order: List[Module], deleted: List[Module]) -> None:
        """
        Replace module order and deleted set together.

        Used by ModuleLifecycleController; the pair must partition the module set.

        Raises:
            ValueError: If order and deleted do not partition the full module set
        """
        combined = list(order) + list(deleted)
        if len(combined) != len(CANONICAL_ORDER) or set(combined) != set(CANONICAL_ORDER):
            raise ValueError(
                f"Order {order} and deleted {deleted} do not partition the module set"
            )
        self._state[ORDER_KEY] = [module.value for module in order]
        self._state[DELETED_KEY] = [module.value for module in deleted]
        self.notify_changed()

    # --- Whole-document operations ---

    def snapshot(self) -> Dict[str, Any]:
        """
        Full serializable copy of the document in persisted wire format.

        Unknown top-level fields carried in from a loaded snapshot are included.
        """
        return {**copy.deepcopy(self._extras), **copy.deepcopy(self._state)}

    def replace(self, snapshot: Optional[Mapping], notify: bool = True) -> None:
        """
        Atomically swap the whole document.

        The incoming snapshot is merged over defaults field by field (see merge_snapshot),
        so partial or drifted snapshots still produce a complete, valid document.

        Args:
            snapshot: Snapshot to load; None or {} resets to defaults
            notify: Whether to notify subscribers (load and reset pass False)
        """
        self._state, self._extras = merge_snapshot(snapshot or {})
        if notify:
            self.notify_changed()


def merge_snapshot(incoming: Mapping) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Merge a (possibly partial or malformed) snapshot over the default document.

    Rules:
    - Missing fields or fields of the wrong type keep their default
    - Profile keys are restricted to the known profile fields
    - Entries are merged over their type's blank entry, restricted to known keys;
      non-mapping entries are dropped
    - Module order and deleted set are filtered to known modules, deduplicated,
      made disjoint (deleted wins) and completed with any missing modules
    - Unknown top-level keys are returned separately so they can be written back

    Args:
        incoming: Snapshot mapping (e.g., decoded from persisted JSON)

    Returns:
        Tuple of (state, extras)
    """
    state = get_default_snapshot()
    repairs: List[str] = []

    if not isinstance(incoming, Mapping):
        log_snapshot_repairs([f"snapshot is {type(incoming).__name__}, not a mapping"])
        return state, {}

    extras = {key: copy.deepcopy(value) for key, value in incoming.items() if key not in SNAPSHOT_KEYS}

    if PROFILE_KEY in incoming:
        profile = incoming[PROFILE_KEY]
        if isinstance(profile, Mapping):
            for key in PROFILE_FIELDS:
                value = profile.get(key)
                if isinstance(value, str):
                    state[PROFILE_KEY][key] = value
                elif value is not None:
                    repairs.append(f"profile.{key}: expected string, got {type(value).__name__}")
        else:
            repairs.append(f"profile: expected mapping, got {type(profile).__name__}")

    for module, schema in ENTRY_SCHEMAS.items():
        if module.value in incoming:
            state[module.value] = _merge_entries(incoming[module.value], module, schema, repairs)

    for content_key in TEXT_CONTENT_KEYS.values():
        value = incoming.get(content_key)
        if isinstance(value, str):
            state[content_key] = value
        elif value is not None:
            repairs.append(f"{content_key}: expected string, got {type(value).__name__}")

    order, deleted = _repair_partition(incoming.get(ORDER_KEY), incoming.get(DELETED_KEY), repairs)
    state[ORDER_KEY] = [module.value for module in order]
    state[DELETED_KEY] = [module.value for module in deleted]

    log_snapshot_repairs(repairs)
    return state, extras


def _merge_entries(
    raw: Any, module: Module, schema: EntrySchema, repairs: List[str]
) -> List[Dict[str, str]]:
    if not isinstance(raw, list):
        repairs.append(f"{module.value}: expected list, got {type(raw).__name__}")
        return [schema.blank()]

    entries = []
    for index, raw_entry in enumerate(raw):
        if not isinstance(raw_entry, Mapping):
            repairs.append(f"{module.value}[{index}]: dropped non-mapping entry")
            continue
        entry = schema.blank()
        for key in schema.fields:
            value = raw_entry.get(key)
            if isinstance(value, str):
                entry[key] = value
        entries.append(entry)
    return entries


def _known_modules(raw: Any) -> List[Module]:
    """Known modules from a raw identifier list, deduplicated, first occurrence wins."""
    if not isinstance(raw, list):
        return []
    modules: List[Module] = []
    for name in raw:
        module = Module.parse(name)
        if module is not None and module not in modules:
            modules.append(module)
    return modules


def _repair_partition(
    raw_order: Any, raw_deleted: Any, repairs: List[str]
) -> Tuple[List[Module], List[Module]]:
    deleted = _known_modules(raw_deleted)
    order = [module for module in _known_modules(raw_order) if module not in deleted]

    missing = [module for module in CANONICAL_ORDER if module not in order and module not in deleted]
    if missing and raw_order is not None:
        repairs.append(f"{ORDER_KEY}: appended missing modules {[m.value for m in missing]}")
    order.extend(missing)

    return order, deleted
