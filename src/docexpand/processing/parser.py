"""
Document parsing.

Splits substituted document text into ordered blocks (prose, fenced code,
code-tab groups) and collects the anchors the document defines and the
internal links it contains. Fenced code is never scanned for anchors or
links.
"""

import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from docexpand.logger import get_default_logger
from docexpand.models import Block, CodeBlock, Document, LinkReference, ProseBlock
from docexpand.processing.fences import is_fence_close, match_fence_open
from docexpand.processing.references import DEFAULT_EXTENSIONS, parse_link_target
from docexpand.processing.tabs import CodeTabGrouper
from docexpand.validation.issues import ValidationIssue


logger = get_default_logger()


HEADING_RE = re.compile(r"^ {0,3}(#{1,6})[ \t]+(.*?)[ \t]*#*[ \t]*$")
HEADING_ID_RE = re.compile(r"\s*\{#([A-Za-z0-9_.:-]+)\}\s*$")
HTML_ID_RE = re.compile(r"<[A-Za-z][\w.-]*\s[^>]*?(?<![\w-])id\s*=\s*[\"']([^\"']+)[\"']")
HTML_NAME_RE = re.compile(r"<a\s[^>]*?(?<![\w-])name\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
HTML_TAG_RE = re.compile(r"</?[A-Za-z][^>]*>")
HREF_RE = re.compile(r"\bhref\s*=\s*[\"']([^\"']+)[\"']")
INLINE_LINK_RE = re.compile(
    r"!?\[(?P<text>(?:[^\[\]]|\[[^\]]*\])*)\]\(\s*(?P<target><[^>]*>|[^\s)]+)"
    r"(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)"
)
LINK_TEXT_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
REFERENCE_DEF_RE = re.compile(r"^ {0,3}\[[^\]]+\]:\s*(?P<target><[^>]*>|\S+)")
CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1")
FRONT_MATTER_KEY_RE = re.compile(r"^[A-Za-z_][\w-]*\s*:")


def slugify(text: str) -> str:
    """
    GitHub-style heading slug.

    Example:
        >>> slugify("Create a table (DDL)")
        'create-a-table-ddl'
    """
    text = LINK_TEXT_RE.sub(r"\1", text)
    text = HTML_TAG_RE.sub("", text)
    text = text.strip().lower()
    text = re.sub(r"[^\w\- ]", "", text)
    return text.replace(" ", "-")


def _mask_code_spans(line: str) -> str:
    # Same length, so match offsets stay valid columns
    return CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)


def _inline_links(line: str, start: int = 0, end: Optional[int] = None) -> List[Tuple[str, int]]:
    # Also collects links nested in link text, e.g. a linked badge image
    found = []
    for match in INLINE_LINK_RE.finditer(line, start, len(line) if end is None else end):
        found.extend(_inline_links(line, match.start("text"), match.end("text")))
        found.append((match.group("target"), match.start() + 1))
    return sorted(found, key=lambda item: item[1])


class ParseResult:
    """Parsed document plus issues raised while grouping its tabs."""

    def __init__(self, document: Document, issues: List[ValidationIssue]):
        self.document = document
        self.issues = issues

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]


class DocumentParser:
    """
    Parses substituted text into an immutable Document.

    Anchors and references are collected in the same pass over the whole
    document, before any reference is resolved, so forward references to
    anchors later in the document are valid.
    """

    def __init__(
        self,
        grouper: Optional[CodeTabGrouper] = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        ignore_patterns: Iterable[str] = (),
    ):
        self.grouper = grouper or CodeTabGrouper()
        self.extensions = tuple(extensions)
        self.ignore_patterns = tuple(ignore_patterns)

    def parse(self, key: str, text: str) -> ParseResult:
        """
        Parse one document.

        Args:
            key: Document key (POSIX path relative to the corpus root)
            text: Substituted document text

        Returns:
            ParseResult
        """
        lines = text.split("\n")
        blocks: List[Block] = []
        issues: List[ValidationIssue] = []
        anchors: Set[str] = set()
        slug_counts: Dict[str, int] = {}
        references: List[LinkReference] = []

        prose: List[str] = []
        prose_start = 1

        def flush_prose():
            if prose:
                blocks.append(ProseBlock(text="\n".join(prose), line=prose_start))
                prose.clear()

        index = self._skip_front_matter(lines)
        if index:
            prose.extend(lines[:index])

        while index < len(lines):
            line = lines[index]

            if self.grouper.is_container_open(line):
                flush_prose()
                tab_result = self.grouper.group(lines, index, key)
                issues.extend(tab_result.issues)
                if tab_result.group is not None:
                    blocks.append(tab_result.group)
                index = max(tab_result.end_index, index + 1)
                continue

            fence = match_fence_open(line)
            if fence is not None:
                flush_prose()
                body: List[str] = []
                cursor = index + 1
                while cursor < len(lines) and not is_fence_close(lines[cursor], fence):
                    body.append(lines[cursor])
                    cursor += 1
                blocks.append(CodeBlock(language=fence.language, body="\n".join(body), line=index + 1))
                index = cursor + 1
                continue

            if not prose:
                prose_start = index + 1
            prose.append(line)
            self._scan_line(key, line, index + 1, anchors, slug_counts, references)
            index += 1

        flush_prose()

        document = Document(
            key=key,
            text=text,
            blocks=tuple(blocks),
            anchors=frozenset(anchors),
            references=tuple(references),
        )
        logger.debug(
            f"Parsed {key}: {len(blocks)} blocks, {len(anchors)} anchors, {len(references)} references"
        )
        return ParseResult(document, issues)

    @staticmethod
    def _skip_front_matter(lines: List[str]) -> int:
        if not lines or lines[0].strip() != "---":
            return 0
        for index in range(1, len(lines)):
            if lines[index].strip() in ("---", "..."):
                # A thematic break pair is not front matter
                if any(FRONT_MATTER_KEY_RE.match(line) for line in lines[1:index]):
                    return index + 1
                return 0
        return 0

    def _scan_line(
        self,
        key: str,
        line: str,
        line_number: int,
        anchors: Set[str],
        slug_counts: Dict[str, int],
        references: List[LinkReference],
    ) -> None:
        masked = _mask_code_spans(line)

        heading = HEADING_RE.match(masked)
        if heading:
            title = line[heading.start(2):heading.end(2)]
            custom = HEADING_ID_RE.search(title)
            if custom:
                anchors.add(custom.group(1))
            else:
                base = slugify(title)
                if base:
                    count = slug_counts.get(base, 0)
                    anchors.add(base if count == 0 else f"{base}-{count}")
                    slug_counts[base] = count + 1

        for pattern in (HTML_ID_RE, HTML_NAME_RE):
            for match in pattern.finditer(masked):
                anchors.add(match.group(1))

        definition = REFERENCE_DEF_RE.match(masked)
        if definition:
            self._add_reference(key, definition.group("target"), line_number, definition.start("target") + 1, references)
            return

        for target, column in _inline_links(masked):
            self._add_reference(key, target, line_number, column, references)

        for match in HREF_RE.finditer(masked):
            self._add_reference(key, match.group(1), line_number, match.start() + 1, references)

    def _add_reference(
        self,
        key: str,
        raw: str,
        line_number: int,
        column: int,
        references: List[LinkReference],
    ) -> None:
        if raw.startswith("<") and raw.endswith(">"):
            raw = raw[1:-1]
        parsed = parse_link_target(raw, key, self.extensions, self.ignore_patterns)
        if parsed is None:
            return
        target, anchor = parsed
        references.append(LinkReference(
            source=key,
            target=target,
            anchor=anchor,
            line=line_number,
            column=column,
            raw=raw,
        ))


def parse_document(key: str, text: str, parser: Optional[DocumentParser] = None) -> ParseResult:
    """
    Convenience function to parse one document with default settings.

    Example:
        >>> result = parse_document("guide.md", "# Setup\\nSee [_](#setup).")
        >>> sorted(result.document.anchors)
        ['setup']
    """
    return (parser or DocumentParser()).parse(key, text)
