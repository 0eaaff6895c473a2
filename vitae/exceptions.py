"""Exception hierarchy for VITAE.

Every error raised by the core derives from VitaeError. None of them is fatal:
the document model stays usable after any failure.
"""

from pathlib import Path
from typing import List, Optional


class VitaeError(Exception):
    """Base class for all VITAE errors."""


class ValidationError(VitaeError):
    """
    User-supplied input cannot be accepted. No state is mutated.

    Attributes:
        message: Error description
        field: Field path the error refers to (e.g., 'profile.name')
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field

        parts = [message]
        if field:
            parts.append(f"(field: {field})")

        super().__init__(" ".join(parts))


class MissingRequiredField(ValidationError):
    """A field required by an operation is empty (e.g., name on export)."""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or "Required field is empty", field=field)


class MalformedPersistedState(VitaeError):
    """
    A persisted snapshot could not be decoded.

    Callers recover by falling back to the default document.

    Attributes:
        source: Where the snapshot was read from
        original_error: The decoding error
    """

    def __init__(
        self,
        message: str,
        source: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.source = source
        self.original_error = original_error

        parts = [message]
        if source:
            parts.append(f"\nSource: {source}")
        if original_error:
            parts.append(f"\nOriginal error: {original_error}")

        super().__init__("".join(parts))


class ReorderRejected(VitaeError):
    """
    A reorder payload was not a permutation of the active modules.

    Attributes:
        requested: The order that was supplied
        active: The active modules at the time of the request
    """

    def __init__(self, requested: List[str], active: List[str]):
        self.requested = requested
        self.active = active
        super().__init__(f"Reorder rejected: {requested} is not a permutation of {active}")


class RewriteError(VitaeError):
    """Base class for rewrite failures surfaced next to the rewrite UI."""


class EmptyInput(RewriteError):
    """The field to rewrite has no text; no request is sent."""

    def __init__(self, message: str = "Nothing to rewrite: the field is empty"):
        super().__init__(message)


class RewriteFailed(RewriteError):
    """
    The rewrite service could not produce a result.

    Attributes:
        message: Error description, including upstream status and body when known
        status_code: HTTP status returned by the service, if any
        body: Response body returned by the service, if any
    """

    def __init__(
        self, message: str, status_code: Optional[int] = None, body: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ExportUnavailable(VitaeError):
    """
    The export artifact could not be produced (library or environment failure).

    Attributes:
        message: Error description
        original_error: Underlying exception, if any
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error

        parts = [message]
        if original_error:
            parts.append(f"\nOriginal error: {original_error}")

        super().__init__("".join(parts))
