"""
Editing Context

Responsibilities:
- Routes UI write events and structural commands to the document model
- Keeps the preview current and schedules saves on every change
- Drives the rewrite request/accept flow and Word export

Owns: EditorSession, RewriteProposal
Never: Defines document structure or rendering rules
"""

from vitae.contexts.editing.session import EditorSession, RewriteProposal

__all__ = ["EditorSession", "RewriteProposal"]
