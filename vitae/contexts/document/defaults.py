"""
Default values for the VITAE document model.

Provides the canonical empty document used:
- at session start when nothing is persisted
- on explicit reset
- as the base that persisted snapshots are merged over (document_model.merge_snapshot)
"""

from typing import Any, Dict

from vitae.contexts.document.modules import (
    CANONICAL_ORDER,
    ENTRY_SCHEMAS,
    PROFILE_FIELDS,
    TEXT_CONTENT_KEYS,
)

PROFILE_KEY = "profile"
ORDER_KEY = "moduleOrder"
DELETED_KEY = "deletedModules"


def get_default_profile() -> Dict[str, str]:
    """Profile with every field empty (photo included)."""
    return {key: "" for key in PROFILE_FIELDS}


def get_default_snapshot() -> Dict[str, Any]:
    """
    Get a complete default document snapshot.

    Returns a fresh dict with:
    - empty profile
    - canonical module order and empty deleted set
    - one blank entry per repeatable module
    - empty text for each text module

    Returns:
        Snapshot dict in persisted wire format
    """
    snapshot: Dict[str, Any] = {
        PROFILE_KEY: get_default_profile(),
        ORDER_KEY: [module.value for module in CANONICAL_ORDER],
        DELETED_KEY: [],
    }
    for module, schema in ENTRY_SCHEMAS.items():
        snapshot[module.value] = [schema.blank()]
    for content_key in TEXT_CONTENT_KEYS.values():
        snapshot[content_key] = ""
    return snapshot


# Top-level keys owned by the model; anything else in a loaded snapshot is carried as-is
SNAPSHOT_KEYS = frozenset(get_default_snapshot())
