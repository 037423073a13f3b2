"""
Skill Registry.

Owns the published ``RegistryIndex`` snapshot of one registry root and its
lifecycle: build, query, reload. There is no module-level registry; callers
construct one and pass it around.

    >>> registry = SkillRegistry(Path("skills"))
    >>> report = registry.build()
    >>> registry.query("two-way binding with signals", version="19")

One writer at a time rebuilds; any number of readers query concurrently
without locking. A rebuild reads, parses and validates every document and
assembles the new index before publishing it with a single reference
assignment, so a reader sees either the old snapshot or the new one.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .config import RegistryConfig
from .errors import CorpusReadError, DuplicateNameError, RebuildCancelled
from .index import NotFound, QueryResult, RegistryIndex
from .loader import SkillLoader, SourceDocument, corpus_fingerprint
from .models import SkillRecord
from .report import BuildReport, LoadTimer
from .validator import DocumentResult, ValidationEngine
from .versions import Version

logger = logging.getLogger(__name__)


class SkillRegistry:
    """
    Registry of skill documents under one root directory.

    Attributes:
        root: Directory holding the skill documents.
        config: Registry configuration.
    """

    def __init__(self, root: Union[str, Path], config: Optional[RegistryConfig] = None):
        self.root = Path(root)
        self.config = config or RegistryConfig()
        self.loader = SkillLoader(self.root, self.config)
        self.engine = ValidationEngine(self.config)
        self._snapshot = RegistryIndex.empty()
        self._last_report: Optional[BuildReport] = None
        self._write_lock = threading.Lock()

    @property
    def snapshot(self) -> RegistryIndex:
        """The currently published snapshot."""
        return self._snapshot

    @property
    def last_report(self) -> Optional[BuildReport]:
        """Report of the last load that published a snapshot."""
        return self._last_report

    def build(self, cancel_event: Optional[threading.Event] = None) -> BuildReport:
        """
        Load the whole corpus and publish a new snapshot.

        Args:
            cancel_event: When set during the load, the rebuild stops and
                nothing is published.

        Returns:
            BuildReport with every document's verdict.

        Raises:
            DuplicateNameError: Two valid documents share a name. The report
                is attached as ``error.report``; the previous snapshot stays
                published.
            CorpusReadError: The root or a document could not be read.
            RebuildCancelled: ``cancel_event`` was set.
        """
        with self._write_lock:
            return self._rebuild(cancel_event, force=True)

    def reload(self, cancel_event: Optional[threading.Event] = None) -> BuildReport:
        """
        Rebuild if the corpus changed since the published snapshot.

        When no document was added, removed or modified, nothing is
        published and the returned report has ``published=False``.
        Raises the same errors as ``build``.
        """
        with self._write_lock:
            return self._rebuild(cancel_event, force=False)

    def query(
        self,
        context: str,
        version: Optional[Union[str, Version]] = None,
        limit: Optional[int] = None,
        include_mismatches: bool = False,
    ) -> List[QueryResult]:
        """Rank skills for a work context against the published snapshot."""
        return self._snapshot.query(
            context,
            version=version,
            limit=limit,
            include_mismatches=include_mismatches,
        )

    def by_name(self, name: str) -> Union[SkillRecord, NotFound]:
        return self._snapshot.by_name(name)

    def by_category(self, category: str) -> Tuple[SkillRecord, ...]:
        return self._snapshot.by_category(category)

    def _rebuild(self, cancel_event: Optional[threading.Event], force: bool) -> BuildReport:
        current = self._snapshot

        with LoadTimer() as timer:
            documents = self._read_documents(cancel_event)
            fingerprint = corpus_fingerprint(documents)

            if not force and fingerprint == current.fingerprint:
                logger.debug(f"Skill corpus unchanged at {self.root}; keeping generation {current.generation}")
                return BuildReport(
                    root=str(self.root),
                    documents=list(self._last_report.documents) if self._last_report else [],
                    generation=current.generation,
                    fingerprint=fingerprint,
                    published=False,
                    duration_ms=timer.duration_ms,
                )

            results = self._validate_documents(documents, cancel_event)
            report = BuildReport(
                root=str(self.root),
                documents=results,
                generation=current.generation + 1,
                fingerprint=fingerprint,
            )

            try:
                snapshot = RegistryIndex.build(
                    [r.record for r in results if r.valid],
                    fingerprint=fingerprint,
                    generation=current.generation + 1,
                )
            except DuplicateNameError as e:
                report.duplicates = e.duplicates
                report.generation = current.generation
                e.report = report
                logger.warning(f"Rebuild of {self.root} aborted: {e}; keeping generation {current.generation}")
                raise

            self._check_cancelled(cancel_event)

        report.duration_ms = timer.duration_ms
        self._snapshot = snapshot
        report.published = True
        self._last_report = report
        logger.info(
            f"Published skill registry generation {snapshot.generation} from {self.root}: "
            f"{len(snapshot)} skill(s), {len(report.invalid_documents)} rejected document(s)"
        )
        return report

    def _read_documents(self, cancel_event: Optional[threading.Event]) -> List[SourceDocument]:
        documents = []
        try:
            for document in self.loader.iter_documents():
                self._check_cancelled(cancel_event)
                documents.append(document)
        except CorpusReadError as e:
            logger.error(f"Rebuild of {self.root} aborted: {e}")
            raise
        return documents

    def _validate_documents(
        self,
        documents: List[SourceDocument],
        cancel_event: Optional[threading.Event],
    ) -> List[DocumentResult]:
        results = []
        for document in documents:
            self._check_cancelled(cancel_event)
            result = self.engine.validate_document(
                document.text,
                category=document.category,
                source_path=document.relative_path,
            )
            if result.parse_errors:
                logger.warning(
                    f"Skipping {document.relative_path}: "
                    + "; ".join(str(e) for e in result.parse_errors)
                )
            elif not result.valid:
                logger.warning(
                    f"Skipping invalid skill '{result.record.name}' in {document.relative_path}: "
                    + "; ".join(str(v) for v in result.validity.violations)
                )
            results.append(result)
        return results

    def _check_cancelled(self, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"Rebuild of {self.root} cancelled; keeping generation {self._snapshot.generation}")
            raise RebuildCancelled(f"Rebuild of {self.root} cancelled")

    def __repr__(self) -> str:
        return f"SkillRegistry(root={str(self.root)!r}, generation={self._snapshot.generation})"


def validate(root: Union[str, Path], config: Optional[RegistryConfig] = None) -> BuildReport:
    """
    Validate every document under ``root`` without keeping a registry.

    Duplicate names are reported in the result instead of being raised.

    Raises:
        CorpusReadError: If the root or a document cannot be read.
    """
    registry = SkillRegistry(root, config)
    try:
        return registry.build()
    except DuplicateNameError as e:
        return e.report
