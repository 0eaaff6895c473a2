"""
Rewrite target binding (last-request-wins).

At most one rewrite target is pending. Each bind() hands out a ticket with a new
generation number; a result may only be applied while its ticket is still the
current one. Superseded requests are not aborted, their results are dropped.
"""

from dataclasses import dataclass
from typing import Optional

from vitae.contexts.document.modules import FieldRef
from vitae.contexts.rewrite.logger import _log_debug


@dataclass(frozen=True)
class RewriteTicket:
    """Proof of one rewrite request: which field, and which generation."""

    generation: int
    target: FieldRef


class RewriteBinding:
    """Tracks the single pending rewrite target."""

    def __init__(self):
        self._generation = 0
        self._current: Optional[RewriteTicket] = None

    @property
    def pending(self) -> Optional[RewriteTicket]:
        """Ticket of the pending target, or None."""
        return self._current

    def bind(self, target: FieldRef) -> RewriteTicket:
        """Bind a new target, superseding any earlier ticket."""
        if self._current is not None:
            _log_debug(f"Superseding rewrite of {self._current.target.describe()}")
        self._generation += 1
        self._current = RewriteTicket(self._generation, target)
        return self._current

    def is_current(self, ticket: RewriteTicket) -> bool:
        """Whether a ticket's result may still be applied."""
        return self._current is not None and ticket == self._current

    def clear(self) -> None:
        """Drop the pending target; every outstanding ticket becomes stale."""
        self._current = None
