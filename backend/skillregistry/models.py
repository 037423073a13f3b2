"""
Skill Registry data models.

Immutable pydantic models for parsed skill documents and their validation
verdicts. Records are created once by the metadata parser; a validated copy
is produced by ``SkillRecord.with_validity`` rather than by mutation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


UNCATEGORIZED = "uncategorized"


class ViolationCode(str, Enum):
    """Kinds of validation violations."""

    INVALID_NAME = "invalid_name"
    MISSING_SECTION = "missing_section"
    TOO_FEW_EXAMPLES = "too_few_examples"
    MALFORMED_VERSION = "malformed_version"
    INVERTED_RANGE = "inverted_range"
    EMPTY_SUPPORTED_VERSIONS = "empty_supported_versions"
    UNSUPPORTED_OUT_OF_RANGE = "unsupported_out_of_range"


class Violation(BaseModel):
    """One specific way a document fails validation."""

    model_config = ConfigDict(frozen=True)

    code: ViolationCode
    message: str
    subject: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, "subject": self.subject}


class Validity(BaseModel):
    """Validation verdict: valid when no violations were found."""

    model_config = ConfigDict(frozen=True)

    violations: Tuple[Violation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    @classmethod
    def ok(cls) -> "Validity":
        return cls()

    @classmethod
    def invalid(cls, violations: Iterable[Violation]) -> "Validity":
        return cls(violations=tuple(violations))

    def codes(self) -> Tuple[ViolationCode, ...]:
        return tuple(v.code for v in self.violations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [v.to_dict() for v in self.violations],
        }


class VersionRange(BaseModel):
    """
    Declared framework compatibility of a skill.

    Values are kept as written in the front matter; ``versions.parse_version``
    turns them into comparable versions.
    """

    model_config = ConfigDict(frozen=True)

    min: str
    max: str
    supported_versions: Tuple[str, ...] = ()


class SkillRecord(BaseModel):
    """
    A parsed skill document.

    Attributes:
        name: Skill identifier, expected to be kebab-case.
        description: Free-text description containing the trigger clause.
        triggers: Normalized trigger phrases, in clause order.
        version_range: Declared version compatibility.
        category: Slash-delimited grouping path derived from the document location.
        required_sections_present: Canonical required section names found in the body.
        code_example_count: Number of closed fenced code blocks in the body.
        source_path: Where the document was read from, if known.
        checksum: MD5 of the raw document text.
        validity: Validation verdict, None until validated.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    triggers: Tuple[str, ...]
    version_range: VersionRange
    category: str = UNCATEGORIZED
    required_sections_present: FrozenSet[str] = frozenset()
    code_example_count: int = Field(default=0, ge=0)
    source_path: Optional[str] = None
    checksum: Optional[str] = None
    validity: Optional[Validity] = None

    @field_validator("triggers")
    @classmethod
    def _triggers_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not phrase.strip() for phrase in value):
            raise ValueError("trigger phrases must be non-empty")
        return value

    @property
    def is_valid(self) -> bool:
        return self.validity is not None and self.validity.valid

    def with_validity(self, validity: Validity) -> "SkillRecord":
        """Return a copy of this record carrying ``validity``."""
        return self.model_copy(update={"validity": validity})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "triggers": list(self.triggers),
            "versions": {
                "min": self.version_range.min,
                "max": self.version_range.max,
                "supported": list(self.version_range.supported_versions),
            },
            "category": self.category,
            "required_sections_present": sorted(self.required_sections_present),
            "code_example_count": self.code_example_count,
            "source_path": self.source_path,
            "validity": self.validity.to_dict() if self.validity else None,
        }
