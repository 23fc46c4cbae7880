"""
End-to-end document assembly.

Orchestrates the complete pipeline for a corpus:
substitute -> group tabs -> build registry -> resolve references.

Documents are processed concurrently; the registry is built sequentially
between the two phases and is read-only while references are resolved.
"""

from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from docexpand.logger import get_default_logger
from docexpand.models import Document
from docexpand.processing.parser import DocumentParser
from docexpand.processing.placeholders import substitute_placeholders
from docexpand.processing.references import DEFAULT_EXTENSIONS, Registry, build_registry, resolve_references
from docexpand.processing.tabs import DEFAULT_FALLBACK, DEFAULT_LANGUAGES, CodeTabGrouper
from docexpand.validation.issues import IssueKind, ValidationIssue


logger = get_default_logger()

T = TypeVar("T")
R = TypeVar("R")


class DocumentState(Enum):
    """Per-document pipeline state. Resolved and Failed are terminal."""
    RAW = "raw"
    SUBSTITUTED = "substituted"
    TABS_GROUPED = "tabs_grouped"
    RESOLVED = "resolved"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class DocumentOutcome:
    """Pipeline outcome for a single document."""

    def __init__(self, key: str):
        self.key = key
        self.state = DocumentState.RAW
        self.history: List[DocumentState] = [DocumentState.RAW]
        self.document: Optional[Document] = None
        self.issues: List[ValidationIssue] = []
        self.substitutions: Dict[str, int] = {}

    def advance(self, state: DocumentState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if not issue.is_error]

    @property
    def is_resolved(self) -> bool:
        return self.state is DocumentState.RESOLVED

    def statistics(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = dict(self.document.statistics()) if self.document else {}
        stats["substitutions"] = sum(self.substitutions.values())
        return stats


class AssemblyResult:
    """
    Result of assembling a corpus.

    Either every document resolved (``is_valid``) or ``errors`` is non-empty.
    Issues are sorted by document key, line, column and kind, so identical
    inputs always give identical output.
    """

    def __init__(self, outcomes: Dict[str, DocumentOutcome], registry: Registry):
        self.outcomes = outcomes
        self.registry = registry

    @property
    def documents(self) -> Dict[str, Document]:
        """Assembled documents that reached the Resolved state."""
        return {
            key: outcome.document
            for key, outcome in self.outcomes.items()
            if outcome.is_resolved and outcome.document is not None
        }

    @property
    def issues(self) -> List[ValidationIssue]:
        collected = [issue for outcome in self.outcomes.values() for issue in outcome.issues]
        return sorted(collected, key=ValidationIssue.sort_key)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if not issue.is_error]

    @property
    def failed(self) -> List[str]:
        return [key for key, outcome in self.outcomes.items() if not outcome.is_resolved]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_lines(self) -> List[str]:
        """One line per error, as printed by the CLI."""
        return [issue.format() for issue in self.errors]

    def summary(self) -> str:
        """Get human-readable summary."""
        lines = [
            "Assembly Summary:",
            f"  Documents: {len(self.outcomes)}",
            f"  Resolved: {len(self.documents)}",
            f"  Failed: {len(self.failed)}",
            f"  Errors: {len(self.errors)}",
            f"  Warnings: {len(self.warnings)}",
        ]
        return "\n".join(lines)


class DocumentAssembler:
    """
    Assembles and validates a documentation corpus.

    Placeholder values are passed in explicitly and applied to every
    document of the run.
    """

    def __init__(
        self,
        placeholders: Optional[Mapping[str, str]] = None,
        scope: str = "all",
        container_tag: str = "CodeTabs",
        allowed_languages: Iterable[str] = DEFAULT_LANGUAGES,
        aliases: Optional[Mapping[str, str]] = None,
        fallback_language: str = DEFAULT_FALLBACK,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        ignore_targets: Iterable[str] = (),
        max_workers: int = 4,
    ):
        """
        Initialize assembler.

        Args:
            placeholders: Placeholder name to value (e.g. {"VERSION": "3.5.0"})
            scope: Substitution scope, "all" or "prose"
            container_tag: Tag name of tab containers
            allowed_languages: Languages allowed in tab groups
            aliases: Language aliases (e.g. {"py": "python"})
            fallback_language: Language used for tags outside the allowed set
            extensions: Interchangeable document extensions for link targets
            ignore_targets: Glob patterns of link targets to skip
            max_workers: Worker threads per phase (1 runs inline)
        """
        self.placeholders = dict(placeholders or {})
        self.scope = scope
        self.extensions = tuple(extensions)
        self.max_workers = max_workers
        self.parser = DocumentParser(
            grouper=CodeTabGrouper(
                container_tag=container_tag,
                allowed_languages=allowed_languages,
                aliases=aliases,
                fallback_language=fallback_language,
            ),
            extensions=self.extensions,
            ignore_patterns=ignore_targets,
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "DocumentAssembler":
        """
        Create an assembler from a loaded configuration dictionary.

        Example:
            >>> from docexpand.config import load_config
            >>> assembler = DocumentAssembler.from_config(load_config())
        """
        tabs = config["tabs"]
        return cls(
            placeholders=config["placeholders"]["values"],
            scope=config["placeholders"]["scope"],
            container_tag=tabs["container_tag"],
            allowed_languages=tabs["allowed_languages"],
            aliases=tabs.get("aliases"),
            fallback_language=tabs["fallback_language"],
            extensions=config["references"]["document_extensions"],
            ignore_targets=config["references"].get("ignore_targets") or (),
            max_workers=config["processing"]["max_workers"],
        )

    def assemble(self, sources: Mapping[str, str]) -> AssemblyResult:
        """
        Assemble every document of a corpus.

        Args:
            sources: Document key to raw text

        Returns:
            AssemblyResult with every document's outcome

        Example:
            >>> assembler = DocumentAssembler(placeholders={"VERSION": "3.5.0"})
            >>> result = assembler.assemble({"a.md": "pip install pyspark==$VERSION$"})
            >>> result.documents["a.md"].text
            'pip install pyspark==3.5.0'
        """
        keys = sorted(sources)
        logger.info(f"Assembling {len(keys)} documents")

        # Phase 1: substitute and parse every document
        prepared = self._map(lambda key: self._prepare(key, sources[key]), keys)
        outcomes = dict(zip(keys, prepared))

        registry = build_registry(
            [self._registry_entry(outcome) for outcome in outcomes.values()],
            self.extensions,
        )

        # Phase 2: resolve references against the read-only registry
        self._map(lambda outcome: self._resolve(outcome, registry), list(outcomes.values()))

        result = AssemblyResult(outcomes, registry)
        logger.info(result.summary())
        return result

    def _map(self, func: Callable[[T], R], items: List[T]) -> List[R]:
        if self.max_workers <= 1 or len(items) <= 1:
            return [func(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(func, items))

    def _prepare(self, key: str, raw: str) -> DocumentOutcome:
        outcome = DocumentOutcome(key)
        try:
            substituted = substitute_placeholders(raw, self.placeholders, document=key, scope=self.scope)
            outcome.issues.extend(substituted.warnings)
            outcome.substitutions = dict(substituted.substitutions)
            outcome.advance(DocumentState.SUBSTITUTED)

            parsed = self.parser.parse(key, substituted.text)
            outcome.issues.extend(parsed.issues)
            outcome.document = parsed.document
            outcome.advance(DocumentState.TABS_GROUPED)
        except Exception as e:
            logger.error(f"Failed to process {key}: {e}", exc_info=True)
            outcome.issues.append(ValidationIssue(
                kind=IssueKind.PROCESSING_ERROR,
                document=key,
                message=f"Unexpected error: {e}",
                details={"exception": type(e).__name__, "stage": outcome.state.value},
            ))
            outcome.advance(DocumentState.FAILED)
        return outcome

    @staticmethod
    def _registry_entry(outcome: DocumentOutcome) -> Document:
        if outcome.document is not None:
            return outcome.document
        # The file exists even if it could not be processed
        return Document(key=outcome.key, text="")

    def _resolve(self, outcome: DocumentOutcome, registry: Registry) -> None:
        if outcome.state is DocumentState.FAILED or outcome.document is None:
            return
        try:
            outcome.issues.extend(resolve_references(outcome.document, registry))
        except Exception as e:
            logger.error(f"Failed to resolve references in {outcome.key}: {e}", exc_info=True)
            outcome.issues.append(ValidationIssue(
                kind=IssueKind.PROCESSING_ERROR,
                document=outcome.key,
                message=f"Unexpected error: {e}",
                details={"exception": type(e).__name__, "stage": outcome.state.value},
            ))
        outcome.advance(DocumentState.FAILED if outcome.errors else DocumentState.RESOLVED)


def assemble_corpus(
    sources: Mapping[str, str],
    placeholders: Optional[Mapping[str, str]] = None,
    **kwargs: Any,
) -> AssemblyResult:
    """
    Convenience function to assemble a corpus with default settings.

    Args:
        sources: Document key to raw text
        placeholders: Placeholder name to value
        **kwargs: Further DocumentAssembler options

    Returns:
        AssemblyResult
    """
    return DocumentAssembler(placeholders=placeholders, **kwargs).assemble(sources)
