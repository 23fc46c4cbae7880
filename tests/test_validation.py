"""
Unit tests for validation issues, reports and the reporter.
"""

import io
import json

import pytest
from rich.console import Console
from rich.table import Table

from docexpand.processing.assembler import assemble_corpus
from docexpand.validation import IssueKind, Severity, ValidationIssue
from docexpand.validation.report import ValidationReport, build_reports
from docexpand.validation.reporter import ValidationReporter


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def failing_result():
    """Assembly result with one error and one warning."""
    return assemble_corpus(
        {
            "a.md": "# A\nSee [b](b.md#nope) $MISSING$",
            "b.md": "# B",
        },
        {"VERSION": "3.5.0"},
    )


@pytest.fixture
def passing_result():
    return assemble_corpus({"a.md": "# A\n[b](b.md#b)", "b.md": "# B"}, {})


def make_console():
    return Console(file=io.StringIO(), width=200, legacy_windows=False)


# ============================================================================
# Issue Tests
# ============================================================================

class TestValidationIssue:
    """Test ValidationIssue."""
    
    def test_severity_by_kind(self):
        assert IssueKind.SUBSTITUTION_WARNING.severity == Severity.WARNING
        assert IssueKind.UNKNOWN_LANGUAGE.severity == Severity.WARNING
        for kind in (
            IssueKind.MALFORMED_TAB_GROUP,
            IssueKind.DANGLING_REFERENCE,
            IssueKind.UNKNOWN_ANCHOR,
            IssueKind.PROCESSING_ERROR,
        ):
            assert kind.severity == Severity.ERROR
    
    def test_format(self):
        issue = ValidationIssue(IssueKind.UNKNOWN_ANCHOR, "a.md", "Anchor missing", line=4, column=2)
        
        assert issue.format() == "a.md:4:2: UnknownAnchor: Anchor missing"
    
    def test_location_without_position(self):
        issue = ValidationIssue(IssueKind.PROCESSING_ERROR, "a.md", "boom")
        
        assert issue.location == "a.md"
        assert issue.format() == "a.md: ProcessingError: boom"
    
    def test_to_dict(self):
        issue = ValidationIssue(
            IssueKind.DANGLING_REFERENCE, "a.md", "missing", line=1, column=3, details={"target": "b.md"},
        )
        
        assert issue.to_dict() == {
            "document": "a.md",
            "kind": "DanglingReference",
            "severity": "error",
            "line": 1,
            "column": 3,
            "message": "missing",
            "details": {"target": "b.md"},
        }
    
    def test_sort_order(self):
        """Test issues sort by document, line, column and kind."""
        issues = [
            ValidationIssue(IssueKind.UNKNOWN_ANCHOR, "b.md", "x", line=1, column=1),
            ValidationIssue(IssueKind.UNKNOWN_ANCHOR, "a.md", "x", line=2, column=1),
            ValidationIssue(IssueKind.DANGLING_REFERENCE, "a.md", "x", line=2, column=1),
            ValidationIssue(IssueKind.UNKNOWN_ANCHOR, "a.md", "x", line=1, column=9),
        ]
        ordered = sorted(issues, key=ValidationIssue.sort_key)
        
        assert [(i.document, i.line, i.column, i.kind.value) for i in ordered] == [
            ("a.md", 1, 9, "UnknownAnchor"),
            ("a.md", 2, 1, "DanglingReference"),
            ("a.md", 2, 1, "UnknownAnchor"),
            ("b.md", 1, 1, "UnknownAnchor"),
        ]
    
    def test_equality(self):
        first = ValidationIssue(IssueKind.UNKNOWN_ANCHOR, "a.md", "x", line=1)
        second = ValidationIssue(IssueKind.UNKNOWN_ANCHOR, "a.md", "x", line=1)
        
        assert first == second
        assert len({first, second}) == 1


# ============================================================================
# Report Tests
# ============================================================================

class TestValidationReport:
    """Test per-document reports."""
    
    def test_build_reports(self, failing_result):
        reports = build_reports(failing_result, version="3.5.0")
        
        assert list(reports) == ["a.md", "b.md"]
        report = reports["a.md"]
        assert report.state == "failed"
        assert report.version == "3.5.0"
        assert not report.is_valid()
        assert [i.kind for i in report.get_errors()] == [IssueKind.UNKNOWN_ANCHOR]
        assert [i.kind for i in report.get_warnings()] == [IssueKind.SUBSTITUTION_WARNING]
        assert reports["b.md"].is_valid()
    
    def test_count_by_kind(self, failing_result):
        counts = build_reports(failing_result)["a.md"].count_by_kind()
        
        assert counts["UnknownAnchor"] == 1
        assert counts["SubstitutionWarning"] == 1
        assert counts["DanglingReference"] == 0
    
    def test_statistics(self, failing_result):
        stats = build_reports(failing_result)["a.md"].statistics
        
        assert stats["references"] == 1
        assert stats["substitutions"] == 0
    
    def test_summary(self):
        report = ValidationReport("a.md", "resolved")
        report.add_statistics({"anchors": 2})
        
        summary = report.summary()
        assert "Validation Report for a.md" in summary
        assert "anchors: 2" in summary


# ============================================================================
# Reporter Tests
# ============================================================================

class TestValidationReporter:
    """Test report rendering and saving."""
    
    def test_json_summary(self, failing_result):
        summary = ValidationReporter().generate_summary_report(build_reports(failing_result), format="json")
        
        assert summary["total_documents"] == 2
        assert summary["overall"] == {"errors": 1, "warnings": 1, "status": "fail"}
        assert summary["documents"]["a.md"]["issues"][0]["kind"] == "UnknownAnchor"
        assert summary["documents"]["b.md"]["status"] == "pass"
        json.dumps(summary)
    
    def test_text_summary(self, passing_result):
        text = ValidationReporter().generate_summary_report(build_reports(passing_result), format="text")
        
        assert "Total Documents: 2" in text
        assert "Overall Status: PASS" in text
    
    def test_console_summary_is_table(self, passing_result):
        table = ValidationReporter().generate_summary_report(build_reports(passing_result))
        
        assert isinstance(table, Table)
    
    def test_save_report_json(self, tmp_path, failing_result):
        reporter = ValidationReporter(tmp_path / "reports")
        path = reporter.save_report(build_reports(failing_result), filename="report.json")
        
        content = json.loads(path.read_text(encoding="utf-8"))
        assert content["overall"]["status"] == "fail"
        assert "generated" in content
    
    def test_save_report_text(self, tmp_path, passing_result):
        path = ValidationReporter(tmp_path).save_report(build_reports(passing_result), format="text")
        
        assert path.suffix == ".txt"
        assert "VALIDATION SUMMARY REPORT" in path.read_text(encoding="utf-8")
    
    def test_save_report_requires_output_dir(self, passing_result):
        with pytest.raises(ValueError):
            ValidationReporter().save_report(build_reports(passing_result))
    
    def test_display_passing(self, passing_result):
        output_console = make_console()
        ValidationReporter(output_console=output_console).display_report(build_reports(passing_result))
        
        assert "All validations passed" in output_console.file.getvalue()
    
    def test_display_failing(self, failing_result):
        output_console = make_console()
        ValidationReporter(output_console=output_console).display_report(
            build_reports(failing_result), detailed=True,
        )
        
        output = output_console.file.getvalue()
        assert "1 validation errors found" in output
        assert "UnknownAnchor" in output
        assert "Detailed Statistics" in output
