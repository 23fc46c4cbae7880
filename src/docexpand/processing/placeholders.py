"""
Placeholder substitution.

Replaces ``$NAME$`` and ``{{ NAME }}`` tokens with configured values in a
single linear pass. Substituted values are never re-scanned.
"""

import re
from typing import Dict, List, Mapping

from docexpand.logger import get_default_logger
from docexpand.processing.fences import code_line_mask
from docexpand.validation.issues import IssueKind, ValidationIssue


logger = get_default_logger()


PLACEHOLDER_RE = re.compile(
    r"\$(?P<dollar>[A-Za-z_][A-Za-z0-9_]*)\$"
    r"|\{\{[ \t]*(?P<brace>[A-Za-z_][A-Za-z0-9_]*)[ \t]*\}\}"
)


class SubstitutionResult:
    """Result of substituting placeholders in one text."""

    def __init__(self, text: str):
        self.text = text
        self.warnings: List[ValidationIssue] = []
        self.substitutions: Dict[str, int] = {}

    @property
    def substitution_count(self) -> int:
        return sum(self.substitutions.values())


def substitute_placeholders(
    text: str,
    values: Mapping[str, str],
    document: str = "<text>",
    scope: str = "all",
) -> SubstitutionResult:
    """
    Replace every known placeholder in text with its configured value.

    Unknown placeholders are left untouched and recorded as
    SubstitutionWarning issues with their line and column.

    Args:
        text: Raw document text
        values: Placeholder name to value (one value per name per run)
        document: Document key used in warnings
        scope: "all" to substitute everywhere, "prose" to leave fenced code alone

    Returns:
        SubstitutionResult with the new text and collected warnings

    Example:
        >>> substitute_placeholders("pip install pyspark==$VERSION$", {"VERSION": "3.5.0"}).text
        'pip install pyspark==3.5.0'
    """
    lines = text.split("\n")
    skip = code_line_mask(lines) if scope == "prose" else [False] * len(lines)
    result = SubstitutionResult(text)

    output: List[str] = []
    for line_number, (line, skipped) in enumerate(zip(lines, skip), start=1):
        if skipped or ("$" not in line and "{{" not in line):
            output.append(line)
            continue
        output.append(_substitute_line(line, line_number, values, document, result))

    result.text = "\n".join(output)

    if result.warnings:
        logger.debug(f"{document}: {len(result.warnings)} unresolved placeholders")
    return result


def _substitute_line(
    line: str,
    line_number: int,
    values: Mapping[str, str],
    document: str,
    result: SubstitutionResult,
) -> str:
    def replace(match: "re.Match[str]") -> str:
        name = match.group("dollar") or match.group("brace")
        if name in values:
            result.substitutions[name] = result.substitutions.get(name, 0) + 1
            return values[name]
        result.warnings.append(ValidationIssue(
            kind=IssueKind.SUBSTITUTION_WARNING,
            document=document,
            message=f"Unresolved placeholder '{match.group(0)}' left in place",
            line=line_number,
            column=match.start() + 1,
            details={"placeholder": name},
        ))
        return match.group(0)

    return PLACEHOLDER_RE.sub(replace, line)
