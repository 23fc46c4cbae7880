"""
Immutable data model for parsed documents.

Documents are parsed once per run and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple, Union


@dataclass(frozen=True)
class ProseBlock:
    """A run of non-code lines."""
    text: str
    line: int


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block outside any tab container."""
    language: str
    body: str
    line: int


@dataclass(frozen=True)
class CodeSegment:
    """
    One tab of a code-tab group.

    ``language`` is the rendered language. ``declared`` holds the normalized
    tag from the fence when it fell back to another language.
    """
    language: str
    body: str
    line: int
    declared: Optional[str] = None

    @property
    def tag(self) -> str:
        return self.declared or self.language


@dataclass(frozen=True)
class CodeTabGroup:
    """
    Ordered, mutually exclusive per-language code samples.

    Segments keep source order. Declared tags are unique within a group and
    a group holds at least one segment. Two unknown tags may both render
    as the fallback language.
    """
    segments: Tuple[CodeSegment, ...]
    line: int

    def __post_init__(self):
        if not self.segments:
            raise ValueError("CodeTabGroup requires at least one segment")
        tags = [segment.tag for segment in self.segments]
        if len(set(tags)) != len(tags):
            raise ValueError(f"CodeTabGroup tags must be unique, got {tags}")

    @property
    def languages(self) -> Tuple[str, ...]:
        return tuple(segment.language for segment in self.segments)

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(segment.tag for segment in self.segments)

    def get(self, language: str) -> Optional[CodeSegment]:
        for segment in self.segments:
            if segment.language == language:
                return segment
        return None


Block = Union[ProseBlock, CodeBlock, CodeTabGroup]


@dataclass(frozen=True)
class LinkReference:
    """
    An internal link found in a document.

    ``target`` is the resolved document key, or None for a reference to an
    anchor in the same document.
    """
    source: str
    target: Optional[str]
    anchor: Optional[str]
    line: int
    column: int
    raw: str

    @property
    def is_self_reference(self) -> bool:
        return self.target is None


@dataclass(frozen=True)
class Document:
    """A parsed, substituted document identified by its path-like key."""
    key: str
    text: str
    blocks: Tuple[Block, ...] = ()
    anchors: FrozenSet[str] = field(default_factory=frozenset)
    references: Tuple[LinkReference, ...] = ()

    @property
    def tab_groups(self) -> Tuple[CodeTabGroup, ...]:
        return tuple(block for block in self.blocks if isinstance(block, CodeTabGroup))

    @property
    def code_blocks(self) -> Tuple[CodeBlock, ...]:
        return tuple(block for block in self.blocks if isinstance(block, CodeBlock))

    def statistics(self) -> dict:
        """Block and reference counts for reporting."""
        return {
            "blocks": len(self.blocks),
            "prose_blocks": sum(1 for block in self.blocks if isinstance(block, ProseBlock)),
            "code_blocks": len(self.code_blocks),
            "tab_groups": len(self.tab_groups),
            "anchors": len(self.anchors),
            "references": len(self.references),
        }
