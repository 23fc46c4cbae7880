"""
Issue taxonomy, per-document validation reports and report rendering.
"""

from docexpand.validation.issues import IssueKind, Severity, ValidationIssue

__all__ = ["IssueKind", "Severity", "ValidationIssue"]
