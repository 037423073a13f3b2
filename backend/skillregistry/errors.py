"""
Registry-level exceptions.

Per-document problems (parse errors, validation violations, version
mismatches, missing names) are returned as values. Only failures that abort
a whole rebuild are raised.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class SkillRegistryError(Exception):
    """Base class for errors raised by the skill registry."""


class DuplicateNameError(SkillRegistryError):
    """Two or more valid documents declare the same skill name.

    Attributes:
        duplicates: Mapping of duplicated name to the source paths declaring it.
        report: Build report for the aborted rebuild, when one was produced.
    """

    def __init__(self, duplicates: Dict[str, List[str]], report: Optional[Any] = None):
        self.duplicates = duplicates
        self.report = report
        names = ", ".join(sorted(duplicates))
        super().__init__(f"Duplicate skill name(s): {names}")

    def to_dict(self) -> Dict[str, Any]:
        return {"duplicates": {name: list(paths) for name, paths in sorted(self.duplicates.items())}}


class CorpusReadError(SkillRegistryError, OSError):
    """The registry root or one of its documents could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class RebuildCancelled(SkillRegistryError):
    """A rebuild was cancelled before its snapshot was published."""
