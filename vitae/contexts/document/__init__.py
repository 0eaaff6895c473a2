"""
Document Context

Responsibilities:
- Holds the canonical résumé state (profile, modules, entries, text blocks)
- Manages repeatable entries and the module order/deleted partition
- Decides which sections and entries are worth rendering
- Persists snapshots through a debounced gateway

Owns: DocumentModel, module definitions, snapshot format, persistence
Never: Produces markup or export artifacts, talks to the rewrite service
"""

from vitae.contexts.document.document_model import DocumentModel, merge_snapshot
from vitae.contexts.document.items import ItemCollectionManager
from vitae.contexts.document.lifecycle import ModuleLifecycleController, ModuleState
from vitae.contexts.document.modules import FieldRef, Module
from vitae.contexts.document.persistence import (
    InMemoryGateway,
    JsonFileGateway,
    PersistenceGateway,
    SaveScheduler,
)

__all__ = [
    "DocumentModel",
    "FieldRef",
    "InMemoryGateway",
    "ItemCollectionManager",
    "JsonFileGateway",
    "Module",
    "ModuleLifecycleController",
    "ModuleState",
    "PersistenceGateway",
    "SaveScheduler",
    "merge_snapshot",
]
