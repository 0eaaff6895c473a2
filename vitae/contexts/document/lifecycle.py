"""
Module lifecycle: ordering, soft-deletion and restoration.

Each module is either Active (with a position in the module order) or Deleted.
The controller keeps moduleOrder and deletedModules a partition of the full module
set at all times:

    delete(m):   Active(i) -> Deleted
    restore(m):  Deleted   -> Active(end of order)
    reorder(p):  permutes the Active modules; rejected unless p is exactly a
                 permutation of the current Active set

The profile header is not a module and is never affected.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from vitae.contexts.document.document_model import DocumentModel
from vitae.contexts.document.logger import _log_debug, _log_info
from vitae.contexts.document.modules import Module
from vitae.exceptions import ReorderRejected

ModuleLike = Union[Module, str]


@dataclass(frozen=True)
class ModuleState:
    """Lifecycle state of one module."""

    module: Module
    active: bool
    position: Optional[int] = None


class ModuleLifecycleController:
    """Maintains the order/deleted partition of one DocumentModel."""

    def __init__(self, model: DocumentModel):
        self.model = model

    def active_modules(self) -> List[Module]:
        return self.model.module_order

    def deleted_modules(self) -> List[Module]:
        return self.model.deleted_modules

    def state(self, module: ModuleLike) -> Optional[ModuleState]:
        """Current state of a module, or None for non-module identifiers."""
        resolved = Module.parse(module)
        if resolved is None:
            return None
        order = self.model.module_order
        if resolved in order:
            return ModuleState(resolved, active=True, position=order.index(resolved))
        return ModuleState(resolved, active=False)

    def delete(self, module: ModuleLike) -> bool:
        """
        Hide a module: remove it from the order and add it to the deleted set.

        Confirmation happens in the UI; once invoked the operation is unconditional.

        Returns:
            True if the module was active and is now deleted
        """
        resolved = Module.parse(module)
        order = self.model.module_order
        if resolved is None or resolved not in order:
            _log_debug(f"delete: '{module}' is not an active module")
            return False

        order.remove(resolved)
        self.model.set_module_partition(order, self.model.deleted_modules + [resolved])
        _log_info(f"Deleted module {resolved.value}")
        return True

    def restore(self, module: ModuleLike) -> bool:
        """
        Bring a deleted module back, appended at the end of the order.

        Returns:
            True if the module was deleted and is now active
        """
        resolved = Module.parse(module)
        deleted = self.model.deleted_modules
        if resolved is None or resolved not in deleted:
            _log_debug(f"restore: '{module}' is not a deleted module")
            return False

        deleted.remove(resolved)
        self.model.set_module_partition(self.model.module_order + [resolved], deleted)
        _log_info(f"Restored module {resolved.value} at position {len(self.model.module_order) - 1}")
        return True

    def reorder(self, new_order: Sequence[ModuleLike]) -> bool:
        """
        Apply a new order of the active modules (as produced by a drag interaction).

        Partial, stale or padded payloads are rejected and the prior order is kept;
        such payloads indicate a collaborator bug, so the rejection is only logged.

        Returns:
            True if the order changed
        """
        current = self.model.module_order
        parsed = [Module.parse(name) for name in new_order]

        if (
            None in parsed
            or len(parsed) != len(current)
            or len(set(parsed)) != len(parsed)
            or set(parsed) != set(current)
        ):
            error = ReorderRejected(
                requested=[str(getattr(name, "value", name)) for name in new_order],
                active=[module.value for module in current],
            )
            _log_debug(str(error))
            return False

        if parsed == current:
            return False

        self.model.set_module_partition(parsed, self.model.deleted_modules)
        _log_debug(f"Reordered modules: {[module.value for module in parsed]}")
        return True
