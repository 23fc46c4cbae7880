"""
Code-tab grouping.

Parses the fenced code segments of a ``<CodeTabs>`` container into a
CodeTabGroup, reporting MalformedTabGroup for unclosed fences or
containers, empty language tags and duplicate languages.
"""

import re
from typing import Dict, Iterable, List, Mapping, Optional

from docexpand.logger import get_default_logger
from docexpand.models import CodeSegment, CodeTabGroup
from docexpand.processing.fences import is_fence_close, match_fence_open
from docexpand.validation.issues import IssueKind, ValidationIssue


logger = get_default_logger()


DEFAULT_LANGUAGES = ("python", "scala", "java", "bash", "sql", "xml", "text")
DEFAULT_FALLBACK = "text"


class TabGroupResult:
    """Result of grouping one tab container."""

    def __init__(self, start_line: int):
        self.start_line = start_line
        self.group: Optional[CodeTabGroup] = None
        self.issues: List[ValidationIssue] = []
        # Index of the first line after the container
        self.end_index: int = 0

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def is_valid(self) -> bool:
        return self.group is not None


class CodeTabGrouper:
    """
    Groups fenced code segments inside a tab container.

    A fence inside a container ends at its closing fence; if the container's
    closing tag comes first, the fence is reported as never closed.
    """

    def __init__(
        self,
        container_tag: str = "CodeTabs",
        allowed_languages: Iterable[str] = DEFAULT_LANGUAGES,
        aliases: Optional[Mapping[str, str]] = None,
        fallback_language: str = DEFAULT_FALLBACK,
    ):
        self.container_tag = container_tag
        self.allowed_languages = frozenset(allowed_languages)
        self.aliases: Dict[str, str] = {k.lower(): v.lower() for k, v in (aliases or {}).items()}
        self.fallback_language = fallback_language
        tag = re.escape(container_tag)
        self._open_re = re.compile(rf"^\s*<{tag}(\s[^>]*)?>\s*$")
        self._close_re = re.compile(rf"^\s*</{tag}\s*>\s*$")

    def is_container_open(self, line: str) -> bool:
        return bool(self._open_re.match(line))

    def is_container_close(self, line: str) -> bool:
        return bool(self._close_re.match(line))

    def normalize_language(self, tag: str) -> str:
        """Lower-case a tag and resolve aliases."""
        tag = tag.lower()
        return self.aliases.get(tag, tag)

    def group(self, lines: List[str], start: int, document: str = "<text>") -> TabGroupResult:
        """
        Group the container opening at ``lines[start]``.

        Args:
            lines: Document lines without trailing newlines
            start: Index of the container's opening line
            document: Document key used in issues

        Returns:
            TabGroupResult; ``group`` is None when the container is malformed
        """
        result = TabGroupResult(start_line=start + 1)
        segments: List[CodeSegment] = []
        malformed = False
        closed = False
        # Resume point if the container turns out to be unclosed
        last_segment_end = start + 1

        index = start + 1
        while index < len(lines):
            line = lines[index]
            if self.is_container_close(line):
                closed = True
                index += 1
                break

            fence = match_fence_open(line)
            if fence is None:
                index += 1
                continue

            body: List[str] = []
            cursor = index + 1
            fence_closed = False
            while cursor < len(lines):
                if is_fence_close(lines[cursor], fence):
                    fence_closed = True
                    break
                if self.is_container_close(lines[cursor]):
                    break
                body.append(lines[cursor])
                cursor += 1

            if not fence_closed:
                malformed = True
                result.issues.append(self._malformed(
                    document, index + 1,
                    f"Code fence opened at line {index + 1} is never closed",
                    {"reason": "unclosed_fence"},
                ))
                index = cursor
                continue

            last_segment_end = cursor + 1
            segment = self._make_segment(fence.language, body, index + 1, document, result)
            if segment is None:
                malformed = True
            else:
                segments.append(segment)
            index = cursor + 1

        if not closed:
            malformed = True
            result.issues.append(self._malformed(
                document, start + 1,
                f"<{self.container_tag}> opened at line {start + 1} is never closed",
                {"reason": "unclosed_container"},
            ))
            index = last_segment_end

        result.end_index = index

        if self._check_duplicates(segments, document, result):
            malformed = True

        if not segments and not malformed:
            malformed = True
            result.issues.append(self._malformed(
                document, start + 1,
                f"<{self.container_tag}> at line {start + 1} contains no code segments",
                {"reason": "empty_group"},
            ))

        if not malformed:
            result.group = CodeTabGroup(segments=tuple(segments), line=start + 1)
        else:
            logger.debug(f"{document}: malformed tab group at line {start + 1}")

        return result

    def _make_segment(
        self,
        raw_language: str,
        body: List[str],
        line_number: int,
        document: str,
        result: TabGroupResult,
    ) -> Optional[CodeSegment]:
        if not raw_language:
            result.issues.append(self._malformed(
                document, line_number,
                f"Code segment at line {line_number} has an empty language tag",
                {"reason": "empty_language"},
            ))
            return None

        language = self.normalize_language(raw_language)
        if language not in self.allowed_languages:
            result.issues.append(ValidationIssue(
                kind=IssueKind.UNKNOWN_LANGUAGE,
                document=document,
                message=(
                    f"Language '{raw_language}' is not one of {sorted(self.allowed_languages)}; "
                    f"rendered as '{self.fallback_language}'"
                ),
                line=line_number,
                column=1,
                details={"language": raw_language, "fallback": self.fallback_language},
            ))
            return CodeSegment(
                language=self.fallback_language,
                body="\n".join(body),
                line=line_number,
                declared=language,
            )

        return CodeSegment(language=language, body="\n".join(body), line=line_number)

    def _check_duplicates(
        self,
        segments: List[CodeSegment],
        document: str,
        result: TabGroupResult,
    ) -> bool:
        lines_by_language: Dict[str, List[int]] = {}
        for segment in segments:
            lines_by_language.setdefault(segment.tag, []).append(segment.line)

        found = False
        for language, lines in lines_by_language.items():
            if len(lines) < 2:
                continue
            found = True
            joined = ", ".join(str(line) for line in lines)
            result.issues.append(self._malformed(
                document, lines[0],
                f"Language '{language}' is declared by multiple segments (lines {joined})",
                {"reason": "duplicate_language", "language": language, "lines": lines},
            ))
        return found

    @staticmethod
    def _malformed(document: str, line: int, message: str, details: Dict) -> ValidationIssue:
        return ValidationIssue(
            kind=IssueKind.MALFORMED_TAB_GROUP,
            document=document,
            message=message,
            line=line,
            column=1,
            details=details,
        )


def group_code_tabs(
    text: str,
    document: str = "<text>",
    grouper: Optional[CodeTabGrouper] = None,
) -> TabGroupResult:
    """
    Group a single tab container given as text.

    The text must start (after blank lines) with the container's opening tag.

    Args:
        text: Container text, from ``<CodeTabs>`` to ``</CodeTabs>``
        document: Document key used in issues
        grouper: Grouper to use (default: built-in allowed languages, no aliases)

    Returns:
        TabGroupResult

    Raises:
        ValueError: If the text does not open a tab container

    Example:
        >>> result = group_code_tabs("<CodeTabs>\\n```python\\nx = 1\\n```\\n</CodeTabs>")
        >>> result.group.languages
        ('python',)
    """
    grouper = grouper or CodeTabGrouper()
    lines = text.split("\n")
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines) or not grouper.is_container_open(lines[start]):
        raise ValueError(f"Text does not open a <{grouper.container_tag}> container")
    return grouper.group(lines, start, document)
