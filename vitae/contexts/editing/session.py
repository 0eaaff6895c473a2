"""
Editor session: the single entry point a UI (or CLI) drives.

Wires one DocumentModel to its collaborators:

    write / add_entry / delete_module / ...   -> DocumentModel mutation
    DocumentModel change notification         -> preview re-render + debounced save
    request_rewrite / apply_rewrite           -> RewriteAdapter + RewriteBinding
    export                                    -> exporter + docx writer

Every mutation goes through the model, so the preview and the persisted snapshot
always reflect the latest state without the UI having to ask for it.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from omegaconf import DictConfig

from vitae.contexts.document.document_model import DocumentModel
from vitae.contexts.document.items import ItemCollectionManager
from vitae.contexts.document.lifecycle import ModuleLifecycleController, ModuleLike
from vitae.contexts.document.modules import PROFILE_SECTION, FieldRef
from vitae.contexts.document.persistence import (
    DEFAULT_DEBOUNCE_S,
    CallLater,
    InMemoryGateway,
    JsonFileGateway,
    PersistenceGateway,
    SaveScheduler,
)
from vitae.contexts.document.photo import MAX_PHOTO_BYTES, PHOTO_FIELD, ingest_photo, ingest_photo_file
from vitae.contexts.editing.logger import _log_debug, _log_info, _log_warning
from vitae.contexts.rendering.docx_writer import write_docx
from vitae.contexts.rendering.exporter import export_document
from vitae.contexts.rendering.preview import EMPTY_STATE_HTML, PreviewRenderer
from vitae.contexts.rewrite.adapter import RewriteAdapter
from vitae.contexts.rewrite.binding import RewriteBinding, RewriteTicket
from vitae.contexts.rewrite.prompts import context_label_for
from vitae.exceptions import EmptyInput, MalformedPersistedState, RewriteFailed, ValidationError
from vitae.utils.config import resolve_path
from vitae.utils.llm import get_provider


@dataclass(frozen=True)
class RewriteProposal:
    """
    A rewrite ready to be shown to the user for acceptance.

    Attributes:
        ticket: Binding ticket; the proposal can only be applied while it is current
        original: Field text the rewrite was requested for
        rewritten: Text returned by the rewrite service
    """

    ticket: RewriteTicket
    original: str
    rewritten: str

    @property
    def target(self) -> FieldRef:
        return self.ticket.target


class EditorSession:
    """
    One editing session over one document.

    Args:
        model: Document to edit (a default document if omitted)
        gateway: Snapshot storage (in-memory if omitted)
        rewrite_adapter: Rewrite service; rewrites fail with RewriteFailed without one
        scheduler: Save scheduler (built from gateway/debounce_s/call_later if omitted)
        debounce_s: Save quiescence window in seconds
        call_later: Timer for the save scheduler (see SaveScheduler)
        photo_max_bytes: Maximum accepted photo size
        renderer: Preview renderer (packaged templates if omitted)
        export_dir: Default export destination directory
    """

    def __init__(
        self,
        model: Optional[DocumentModel] = None,
        gateway: Optional[PersistenceGateway] = None,
        rewrite_adapter: Optional[RewriteAdapter] = None,
        scheduler: Optional[SaveScheduler] = None,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        call_later: Optional[CallLater] = None,
        photo_max_bytes: int = MAX_PHOTO_BYTES,
        renderer: Optional[PreviewRenderer] = None,
        export_dir: Optional[Path] = None,
    ):
        self.model = model if model is not None else DocumentModel()
        self.gateway = gateway if gateway is not None else InMemoryGateway()
        self.scheduler = scheduler or SaveScheduler(self.gateway, delay=debounce_s, call_later=call_later)
        self.items = ItemCollectionManager(self.model)
        self.lifecycle = ModuleLifecycleController(self.model)
        self.rewrite_adapter = rewrite_adapter
        self.binding = RewriteBinding()
        self.renderer = renderer or PreviewRenderer()
        self.photo_max_bytes = photo_max_bytes
        self.export_dir = Path(export_dir) if export_dir else Path(".")

        self._preview = self.renderer.render(self.model.snapshot())
        self._unsubscribe = self.model.subscribe(self._on_change)

    @classmethod
    def from_config(
        cls,
        config: DictConfig,
        data_path: Optional[Path] = None,
        rewrite_adapter: Optional[RewriteAdapter] = None,
        call_later: Optional[CallLater] = None,
    ) -> "EditorSession":
        """
        Build a session from loaded configuration.

        The rewrite adapter is only built when an API key is configured, so
        editing, preview and export work without one.

        Args:
            config: Config from vitae.utils.load_config()
            data_path: Snapshot file overriding persistence.path
            rewrite_adapter: Adapter overriding the configured provider
            call_later: Timer for the save scheduler
        """
        path = resolve_path(data_path or config.persistence.path)
        if rewrite_adapter is None and config.llm.api_key:
            rewrite_adapter = RewriteAdapter(get_provider(config))

        return cls(
            gateway=JsonFileGateway(path),
            rewrite_adapter=rewrite_adapter,
            debounce_s=float(config.persistence.debounce_s),
            call_later=call_later,
            photo_max_bytes=int(config.photo.max_bytes),
            export_dir=resolve_path(config.export.output_dir),
        )

    # --- Change propagation ---

    def _on_change(self, model: DocumentModel) -> None:
        snapshot = model.snapshot()
        self._preview = self.renderer.render(snapshot)
        self.scheduler.schedule(snapshot)

    @property
    def preview(self) -> str:
        """Latest preview fragment ("" when the profile is empty)."""
        return self._preview

    def preview_html(self) -> str:
        """Latest preview, with the empty-state placeholder substituted for ""."""
        return self._preview or EMPTY_STATE_HTML

    # --- Load ---

    def load(self) -> bool:
        """
        Replace the document with the persisted snapshot, if any.

        Undecodable or non-object snapshots are logged and replaced by the default
        document. Loading never schedules a save.

        Returns:
            True if a persisted snapshot was loaded
        """
        try:
            data = self.gateway.load()
        except MalformedPersistedState as e:
            _log_warning(f"Ignoring unreadable persisted snapshot: {e.message}")
            data = None

        if data is not None and not isinstance(data, Mapping):
            _log_warning(f"Ignoring persisted snapshot of type {type(data).__name__}")
            data = None

        self.model.replace(data, notify=False)
        self._preview = self.renderer.render(self.model.snapshot())
        if data is not None:
            _log_info("Loaded persisted snapshot")
        return data is not None

    # --- Field access ---

    def read(self, ref: FieldRef) -> Optional[str]:
        """Current value of a field, or None if the reference addresses nothing."""
        if ref.section == PROFILE_SECTION:
            return self.model.get(f"{PROFILE_SECTION}.{ref.field}")

        module = ref.module
        if module is None:
            return None
        if not module.is_repeatable:
            return self.model.get(module.content_key)

        entries = self.model.entries(module)
        if not isinstance(ref.index, int) or isinstance(ref.index, bool) or not 0 <= ref.index < len(entries):
            return None
        return entries[ref.index].get(ref.field)

    def write(self, ref: FieldRef, value: Optional[str]) -> bool:
        """
        Apply one field write event.

        Returns:
            True if the model changed; unknown references are ignored
        """
        if ref.section == PROFILE_SECTION:
            changed = self.model.set(f"{PROFILE_SECTION}.{ref.field}", value)
        else:
            module = ref.module
            if module is None:
                changed = False
            elif module.is_repeatable:
                changed = self.items.set_field(module, ref.index, ref.field, value)
            else:
                changed = self.model.set(module.content_key, value)

        if not changed:
            _log_debug(f"Ignored write to {ref.describe()}")
        return changed

    # --- Structure ---

    def add_entry(self, module: ModuleLike) -> Optional[int]:
        return self.items.add(module)

    def remove_entry(self, module: ModuleLike, index: int) -> bool:
        return self.items.remove(module, index)

    def delete_module(self, module: ModuleLike) -> bool:
        return self.lifecycle.delete(module)

    def restore_module(self, module: ModuleLike) -> bool:
        return self.lifecycle.restore(module)

    def reorder_modules(self, new_order: Sequence[ModuleLike]) -> bool:
        return self.lifecycle.reorder(new_order)

    def active_modules(self) -> List[str]:
        return [module.value for module in self.lifecycle.active_modules()]

    def deleted_modules(self) -> List[str]:
        return [module.value for module in self.lifecycle.deleted_modules()]

    # --- Photo ---

    def set_photo(self, data: bytes, mime_type: Optional[str]) -> None:
        """
        Validate and store a profile photo.

        Raises:
            ValidationError: If the file is not an image or exceeds the size limit
        """
        self.model.set(PHOTO_FIELD, ingest_photo(data, mime_type, max_bytes=self.photo_max_bytes))

    def set_photo_file(self, path: Path) -> None:
        """Validate and store a profile photo read from disk."""
        self.model.set(PHOTO_FIELD, ingest_photo_file(path, max_bytes=self.photo_max_bytes))

    def remove_photo(self) -> None:
        self.model.set(PHOTO_FIELD, "")

    # --- Export ---

    def export(self, destination_dir: Optional[Path] = None) -> Path:
        """
        Export the current document as a Word file.

        Args:
            destination_dir: Target directory (defaults to the configured export dir)

        Returns:
            Path of the written .docx

        Raises:
            MissingRequiredField: If profile.name is empty
            ExportUnavailable: If the Word document could not be produced
        """
        document = export_document(self.model.snapshot())
        target_dir = Path(destination_dir) if destination_dir else self.export_dir
        return write_docx(document, target_dir / document.filename)

    # --- Reset ---

    def reset(self) -> None:
        """
        Return to the default document and forget all persisted state.

        Any pending save is dropped and any pending rewrite becomes stale.
        """
        self.scheduler.cancel()
        self.binding.clear()
        try:
            self.gateway.clear()
        except OSError as e:
            _log_warning(f"Failed to clear persisted snapshot: {e}")
        self.model.replace(None, notify=False)
        self._preview = self.renderer.render(self.model.snapshot())
        _log_info("Document reset to defaults")

    # --- Rewrite ---

    async def request_rewrite(self, target: FieldRef) -> Optional[RewriteProposal]:
        """
        Request a rewrite of one field's text.

        The target is bound before the request is sent; a later request_rewrite()
        (or reset/discard) makes this one stale. Stale results and stale failures
        are dropped silently.

        Returns:
            RewriteProposal, or None if the request was superseded meanwhile

        Raises:
            ValidationError: If target does not address an existing field
            EmptyInput: If the field is empty (the current binding is left alone)
            RewriteFailed: If the service fails, or no service is configured
        """
        text = self.read(target)
        if text is None:
            raise ValidationError("Rewrite target does not exist", field=target.describe())
        if not text.strip():
            raise EmptyInput()
        if self.rewrite_adapter is None:
            raise RewriteFailed("Rewrite service is not configured (set VITAE_LLM_API_KEY)")

        ticket = self.binding.bind(target)
        try:
            rewritten = await self.rewrite_adapter.request(text, context_label_for(target))
        except RewriteFailed:
            if not self.binding.is_current(ticket):
                _log_debug(f"Dropping failure of superseded rewrite for {target.describe()}")
                return None
            self.binding.clear()
            raise

        if not self.binding.is_current(ticket):
            _log_debug(f"Dropping superseded rewrite for {target.describe()}")
            return None
        return RewriteProposal(ticket=ticket, original=text, rewritten=rewritten)

    def apply_rewrite(self, proposal: RewriteProposal, text: Optional[str] = None) -> bool:
        """
        Write an accepted rewrite into its target field.

        Args:
            proposal: Proposal returned by request_rewrite()
            text: User-edited version of the rewrite (defaults to proposal.rewritten)

        Returns:
            True if the field was written; False if the proposal is stale
        """
        if not self.binding.is_current(proposal.ticket):
            _log_debug(f"Not applying stale rewrite for {proposal.target.describe()}")
            return False

        self.binding.clear()
        return self.write(proposal.target, proposal.rewritten if text is None else text)

    def discard_rewrite(self) -> None:
        """Drop the pending rewrite without touching the document."""
        self.binding.clear()

    # --- Shutdown ---

    def flush(self) -> bool:
        """Write any pending snapshot now. Returns True if a write happened."""
        return self.scheduler.flush()

    def close(self) -> None:
        """Flush pending saves and detach from the model."""
        self.flush()
        self._unsubscribe()
