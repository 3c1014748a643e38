"""Rendering pipeline for note export, transport-agnostic.

Contains:
- sources: the note/resource/compiler Protocols the pipeline calls
- inliner: attachment references → data-URI markup
- compiler: markdown-it-py primary with a Python-Markdown fallback
- document: standalone page assembly
- gate: password-gated wrapper for "encrypted" shares
- exporter: the end-to-end share operation
"""
