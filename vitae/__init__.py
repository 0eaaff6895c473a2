"""
VITAE - Visual Interactive Tool for Assembling Employment résumés

A single-user résumé builder: structured personal/career data is edited in place,
rendered live as preview markup, and exported as a formatted Word document.

Architecture:
- Document Context: Résumé model, repeatable entries, module ordering and soft-deletion, persistence
- Rendering Context: Preview markup and exportable document structure (DOCX encoding)
- Rewrite Context: AI-assisted rewrite of a single targeted field
- Editing Context: Session that wires mutations to preview, debounced saves and rewrites
"""

__version__ = "0.1.0"
