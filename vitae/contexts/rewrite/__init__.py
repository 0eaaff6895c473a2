"""
Rewrite Context

Responsibilities:
- Builds the résumé rewrite instruction and context labels
- Sends rewrite requests through the configured LLM provider
- Tracks the single pending rewrite target (last request wins)

Owns: Prompt text, RewriteAdapter, RewriteBinding
Never: Writes to the document model (the editing session applies accepted rewrites)
"""

from vitae.contexts.rewrite.adapter import RewriteAdapter
from vitae.contexts.rewrite.binding import RewriteBinding, RewriteTicket
from vitae.contexts.rewrite.prompts import DEFAULT_CONTEXT_LABEL, build_system_prompt, context_label_for

__all__ = [
    "DEFAULT_CONTEXT_LABEL",
    "RewriteAdapter",
    "RewriteBinding",
    "RewriteTicket",
    "build_system_prompt",
    "context_label_for",
]
