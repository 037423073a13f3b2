"""
Build and Validation Report.

Machine-consumable summary of one corpus load: the verdict for every
document, registry-wide duplicate names, and timing metadata. The report
doubles as the CLI exit-code source.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .validator import DocumentResult


REPORT_VERSION = "skill-registry-report/1.0"
TOOL_VERSION = "1.0.0"

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_UNREADABLE = 2


@dataclass
class BuildReport:
    """
    Result of loading a registry root.

    Attributes:
        root: Registry root that was loaded.
        documents: Per-document parse/validation results, in path order.
        duplicates: Duplicated skill names and the documents declaring them.
        generation: Snapshot generation produced (or still published).
        fingerprint: Corpus digest of the load.
        published: Whether this load replaced the published snapshot.
        duration_ms: Wall time of the load.
        generated_at: ISO timestamp of the load.
    """

    root: str
    documents: List[DocumentResult] = field(default_factory=list)
    duplicates: Dict[str, List[str]] = field(default_factory=dict)
    generation: int = 0
    fingerprint: Optional[str] = None
    published: bool = False
    duration_ms: int = 0
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def valid_documents(self) -> List[DocumentResult]:
        return [d for d in self.documents if d.valid]

    @property
    def invalid_documents(self) -> List[DocumentResult]:
        return [d for d in self.documents if not d.valid]

    @property
    def valid(self) -> bool:
        """True if every document is valid and no name is duplicated."""
        return not self.duplicates and all(d.valid for d in self.documents)

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.valid else EXIT_INVALID

    def entries(self) -> List[Dict[str, Any]]:
        """One ``{document_path, validity}`` entry per document."""
        return [d.to_dict() for d in self.documents]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "report_version": REPORT_VERSION,
            "tool_version": TOOL_VERSION,
            "root": self.root,
            "valid": self.valid,
            "generation": self.generation,
            "fingerprint": self.fingerprint,
            "published": self.published,
            "totals": {
                "documents": len(self.documents),
                "valid": len(self.valid_documents),
                "invalid": len(self.invalid_documents),
            },
            "duplicates": {name: list(paths) for name, paths in sorted(self.duplicates.items())},
            "documents": self.entries(),
            "generated_at": self.generated_at,
            "duration_ms": self.duration_ms,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = []
        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Skill Registry Validation: {status}")
        lines.append(f"  Root: {self.root}")
        lines.append(
            f"  Documents: {len(self.documents)} "
            f"(valid: {len(self.valid_documents)}, invalid: {len(self.invalid_documents)})"
        )

        for document in self.invalid_documents:
            lines.append(f"\n  {document.source_path}:")
            for error in document.parse_errors:
                lines.append(f"    - {error}")
            if document.validity:
                for violation in document.validity.violations:
                    lines.append(f"    - {violation}")

        if self.duplicates:
            lines.append("\n  Duplicate Names:")
            for name, paths in sorted(self.duplicates.items()):
                lines.append(f"    - {name}: {', '.join(paths)}")

        return "\n".join(lines)


class LoadTimer:
    """Wall time of one corpus load, in milliseconds."""

    def __init__(self):
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    def __enter__(self) -> "LoadTimer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc_info) -> None:
        self._stopped = time.perf_counter()

    @property
    def duration_ms(self) -> int:
        """Elapsed time; still running while inside the block."""
        if self._started is None:
            return 0
        end = self._stopped if self._stopped is not None else time.perf_counter()
        return int((end - self._started) * 1000)
