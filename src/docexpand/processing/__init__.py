"""
Document processing: placeholder substitution, code-tab grouping,
cross-reference resolution and corpus assembly.
"""

from docexpand.processing.assembler import (
    AssemblyResult,
    DocumentAssembler,
    DocumentOutcome,
    DocumentState,
    assemble_corpus,
)
from docexpand.processing.placeholders import SubstitutionResult, substitute_placeholders
from docexpand.processing.references import Registry, build_registry, resolve_references
from docexpand.processing.tabs import TabGroupResult, group_code_tabs

__all__ = [
    "AssemblyResult",
    "DocumentAssembler",
    "DocumentOutcome",
    "DocumentState",
    "Registry",
    "SubstitutionResult",
    "TabGroupResult",
    "assemble_corpus",
    "build_registry",
    "group_code_tabs",
    "resolve_references",
    "substitute_placeholders",
]
