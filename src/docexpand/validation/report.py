"""
Per-document validation reports.

Groups the issues of an AssemblyResult by document together with the
document's pipeline state and statistics.
"""

from typing import Any, Dict, List

from docexpand.processing.assembler import AssemblyResult, DocumentOutcome
from docexpand.validation.issues import IssueKind, ValidationIssue


class ValidationReport:
    """Container for the validation results of one document."""
    
    def __init__(self, document: str, state: str, version: str = ""):
        """Initialize validation report."""
        self.document = document
        self.state = state
        self.version = version
        self.issues: List[ValidationIssue] = []
        self.statistics: Dict[str, Any] = {}
    
    @classmethod
    def from_outcome(cls, outcome: DocumentOutcome, version: str = "") -> "ValidationReport":
        report = cls(outcome.key, outcome.state.value, version)
        for issue in sorted(outcome.issues, key=ValidationIssue.sort_key):
            report.add_issue(issue)
        report.add_statistics(outcome.statistics())
        return report
    
    def add_issue(self, issue: ValidationIssue):
        """Add a validation issue."""
        self.issues.append(issue)
    
    def add_statistics(self, stats: Dict[str, Any]):
        """Add statistics to the report."""
        self.statistics.update(stats)
    
    def get_errors(self) -> List[ValidationIssue]:
        """Get all error-level issues."""
        return [i for i in self.issues if i.is_error]
    
    def get_warnings(self) -> List[ValidationIssue]:
        """Get all warning-level issues."""
        return [i for i in self.issues if not i.is_error]
    
    def count_by_kind(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in IssueKind}
        for issue in self.issues:
            counts[issue.kind.value] += 1
        return counts
    
    def is_valid(self) -> bool:
        """Check if the document has no errors."""
        return len(self.get_errors()) == 0
    
    def summary(self) -> str:
        """Generate a summary of validation results."""
        lines = [
            f"Validation Report for {self.document}",
            f"State: {self.state}",
            f"Errors: {len(self.get_errors())}",
            f"Warnings: {len(self.get_warnings())}",
        ]
        
        if self.statistics:
            lines.append("\nStatistics:")
            for key, value in self.statistics.items():
                lines.append(f"  {key}: {value}")
        
        return "\n".join(lines)


def build_reports(result: AssemblyResult, version: str = "") -> Dict[str, ValidationReport]:
    """
    Build one report per document, ordered by document key.

    Args:
        result: Assembly result
        version: Release version the corpus was assembled for (for display)

    Returns:
        Dictionary of document key to ValidationReport
    """
    return {
        key: ValidationReport.from_outcome(result.outcomes[key], version)
        for key in sorted(result.outcomes)
    }
