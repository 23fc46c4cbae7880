"""
Cross-reference resolution.

Builds the read-only anchor Registry from every document in a corpus and
validates each document's internal links against it. Broken links are
collected as DanglingReference / UnknownAnchor issues, never raised.
"""

import fnmatch
import posixpath
import re
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import unquote

from docexpand.logger import get_default_logger
from docexpand.models import Document, LinkReference
from docexpand.validation.issues import IssueKind, ValidationIssue


logger = get_default_logger()


DEFAULT_EXTENSIONS = (".md", ".mdx")

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


def parse_link_target(
    raw: str,
    source: str,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ignore_patterns: Iterable[str] = (),
) -> Optional[Tuple[Optional[str], Optional[str]]]:
    """
    Classify a raw link target and resolve it to a document key.

    Relative paths resolve against the source document's directory; a
    leading ``/`` resolves from the corpus root.

    Args:
        raw: Link target as written (e.g. ``../delta-batch.md#ddlcreatetable``)
        source: Key of the document containing the link
        extensions: Suffixes that mark a target as a corpus document
        ignore_patterns: Glob patterns of raw targets to skip

    Returns:
        ``(target_key, anchor)`` for internal links, with ``target_key`` None
        for same-document anchors; None for external, asset or ignored links

    Example:
        >>> parse_link_target("delta-batch.md#ddlcreatetable", "quick-start.mdx")
        ('delta-batch.md', 'ddlcreatetable')
        >>> parse_link_target("#create-a-table", "quick-start.mdx")
        (None, 'create-a-table')
        >>> parse_link_target("https://delta.io", "quick-start.mdx") is None
        True
    """
    raw = raw.strip()
    if not raw or raw.startswith("//") or SCHEME_RE.match(raw):
        return None
    if any(fnmatch.fnmatchcase(raw, pattern) for pattern in ignore_patterns):
        return None

    path, _, anchor = raw.partition("#")
    path = unquote(path.split("?", 1)[0])
    anchor = unquote(anchor) or None

    if not path:
        if anchor is None:
            return None
        return None, anchor

    suffixes = tuple(ext.lower() for ext in extensions)
    if not path.lower().endswith(suffixes):
        return None

    if path.startswith("/"):
        key = posixpath.normpath(path.lstrip("/"))
    else:
        key = posixpath.normpath(posixpath.join(posixpath.dirname(source), path))
    return key, anchor


class Registry:
    """
    Read-only mapping from document key to the anchors it defines.

    Built once per run from the full document set before any reference is
    resolved. Lookups treat the configured document extensions as
    interchangeable, so ``delta-batch.md`` finds ``delta-batch.mdx``.
    """

    def __init__(
        self,
        anchors: Mapping[str, Iterable[str]],
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        self._anchors = MappingProxyType(
            {key: frozenset(values) for key, values in sorted(anchors.items())}
        )
        self.extensions = tuple(extensions)

    @classmethod
    def from_documents(
        cls,
        documents: Iterable[Document],
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> "Registry":
        return cls({document.key: document.anchors for document in documents}, extensions)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.resolve_key(key) is not None

    def __len__(self) -> int:
        return len(self._anchors)

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._anchors.keys())

    def items(self):
        return self._anchors.items()

    def resolve_key(self, key: str) -> Optional[str]:
        """
        Find the registered key for a link target.

        Tries the key as given, then with each alternative document extension.
        """
        if key in self._anchors:
            return key
        stem, ext = posixpath.splitext(key)
        if ext.lower() not in {e.lower() for e in self.extensions}:
            return None
        for alternative in self.extensions:
            candidate = stem + alternative
            if candidate in self._anchors:
                return candidate
        return None

    def anchors(self, key: str) -> FrozenSet[str]:
        """Anchors defined by a registered document (empty if unknown)."""
        resolved = self.resolve_key(key)
        if resolved is None:
            return frozenset()
        return self._anchors[resolved]

    def to_dict(self) -> Dict[str, List[str]]:
        return {key: sorted(values) for key, values in self._anchors.items()}


def build_registry(
    documents: Iterable[Document],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> Registry:
    """
    Build the anchor registry for a full document set.

    Args:
        documents: Every parsed document of the corpus
        extensions: Interchangeable document extensions

    Returns:
        Registry
    """
    registry = Registry.from_documents(documents, extensions)
    logger.debug(f"Built registry with {len(registry)} documents")
    return registry


def resolve_reference(reference: LinkReference, registry: Registry) -> Optional[ValidationIssue]:
    """
    Validate one reference against the registry.

    Returns:
        None if the reference resolves, otherwise the issue describing it
    """
    key = reference.target if reference.target is not None else reference.source
    resolved = registry.resolve_key(key)

    if resolved is None:
        return ValidationIssue(
            kind=IssueKind.DANGLING_REFERENCE,
            document=reference.source,
            message=f"Link target '{key}' does not exist (link: {reference.raw})",
            line=reference.line,
            column=reference.column,
            details={"target": key, "anchor": reference.anchor, "raw": reference.raw},
        )

    if reference.anchor is not None and reference.anchor not in registry.anchors(resolved):
        return ValidationIssue(
            kind=IssueKind.UNKNOWN_ANCHOR,
            document=reference.source,
            message=f"Anchor '#{reference.anchor}' is not defined in '{resolved}' (link: {reference.raw})",
            line=reference.line,
            column=reference.column,
            details={"target": resolved, "anchor": reference.anchor, "raw": reference.raw},
        )

    return None


def resolve_references(document: Document, registry: Registry) -> List[ValidationIssue]:
    """
    Validate every reference of a document, collecting all failures.

    Args:
        document: Parsed document
        registry: Registry built from the full corpus

    Returns:
        List of DanglingReference / UnknownAnchor issues in source order
    """
    issues = []
    for reference in document.references:
        issue = resolve_reference(reference, registry)
        if issue is not None:
            issues.append(issue)
    return issues
