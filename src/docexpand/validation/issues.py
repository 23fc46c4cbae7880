"""
Issue taxonomy for corpus validation.

Every problem found while assembling a corpus is recorded as a
ValidationIssue and collected; nothing here is raised.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Severity(Enum):
    """Issue severity. Only errors make a run fail."""
    ERROR = "error"
    WARNING = "warning"

    def __str__(self) -> str:
        return self.value


class IssueKind(Enum):
    """
    Kind tag of a validation issue.

    - SUBSTITUTION_WARNING: unknown placeholder left in place
    - UNKNOWN_LANGUAGE: tab language outside the allowed set, rendered as text
    - MALFORMED_TAB_GROUP: unclosed fence or container, empty tag, duplicate tag
    - DANGLING_REFERENCE: link target document is not in the registry
    - UNKNOWN_ANCHOR: target document exists but does not define the anchor
    - PROCESSING_ERROR: unexpected failure while processing one document
    """
    SUBSTITUTION_WARNING = "SubstitutionWarning"
    UNKNOWN_LANGUAGE = "UnknownLanguage"
    MALFORMED_TAB_GROUP = "MalformedTabGroup"
    DANGLING_REFERENCE = "DanglingReference"
    UNKNOWN_ANCHOR = "UnknownAnchor"
    PROCESSING_ERROR = "ProcessingError"

    def __str__(self) -> str:
        return self.value

    @property
    def severity(self) -> Severity:
        if self in (IssueKind.SUBSTITUTION_WARNING, IssueKind.UNKNOWN_LANGUAGE):
            return Severity.WARNING
        return Severity.ERROR


class ValidationIssue:
    """Represents a single issue found in a document."""

    def __init__(
        self,
        kind: IssueKind,
        document: str,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize validation issue.

        Args:
            kind: Issue kind tag
            document: Key of the document the issue was found in
            message: Human-readable description
            line: 1-based line number (optional)
            column: 1-based column number (optional)
            details: Additional structured details (e.g. target, lines)
        """
        self.kind = kind
        self.document = document
        self.message = message
        self.line = line
        self.column = column
        self.details = details or {}

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def location(self) -> str:
        """Location as ``key:line:column``, omitting unknown parts."""
        parts = [self.document]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)

    def sort_key(self) -> Tuple[str, int, int, str, str]:
        return (
            self.document,
            self.line if self.line is not None else 0,
            self.column if self.column is not None else 0,
            self.kind.value,
            self.message,
        )

    def format(self) -> str:
        """Single-line rendering used for stderr output."""
        return f"{self.location}: {self.kind.value}: {self.message}"

    def __repr__(self) -> str:
        return f"ValidationIssue(kind={self.kind.value}, location={self.location}, message={self.message})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationIssue):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "document": self.document,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "details": self.details,
        }
