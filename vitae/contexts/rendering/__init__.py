"""
Rendering Context

Responsibilities:
- Renders the live HTML preview of a document snapshot
- Builds the structured export document (paragraphs, runs, styling)
- Encodes the export document as a .docx file

Owns: Markup templates, escaping, export structure, docx encoding
Never: Mutates the document model
"""
