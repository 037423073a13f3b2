"""
Validation Engine.

Checks a parsed skill record and its body against the registry's content
rules and reports every violation found in one pass:
- Name format (kebab-case)
- Required body sections
- Minimum number of fenced code examples
- Version range consistency
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import RegistryConfig
from ..models import UNCATEGORIZED, SkillRecord, Validity, Violation, ViolationCode
from ..parser import MetadataParser, ParseError
from ..versions import VersionVerdict, bound_verdict, is_inverted, try_parse_version
from ..sections import find_sections, scan_body


@dataclass
class DocumentResult:
    """
    Parse and validation result for a single document.

    Exactly one of ``parse_errors`` (non-empty) or ``record`` is set.
    """

    source_path: Optional[str]
    record: Optional[SkillRecord] = None
    parse_errors: List[ParseError] = field(default_factory=list)

    @property
    def validity(self) -> Optional[Validity]:
        return self.record.validity if self.record else None

    @property
    def valid(self) -> bool:
        return self.record is not None and self.record.is_valid

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_path": self.source_path,
            "name": self.record.name if self.record else None,
            "valid": self.valid,
            "parse_errors": [e.to_dict() for e in self.parse_errors],
            "violations": (
                [v.to_dict() for v in self.validity.violations] if self.validity else []
            ),
        }


class ValidationEngine:
    """
    Single-pass validator for skill records.

    Validation never stops at the first failure and has no side effects;
    running it twice on the same input gives the same violations in the
    same order.
    """

    def __init__(self, config: Optional[RegistryConfig] = None):
        """
        Initialize the validation engine.

        Args:
            config: Registry configuration (required sections, example count).
        """
        self.config = config or RegistryConfig()
        self._name_pattern = re.compile(self.config.name_pattern)
        self.parser = MetadataParser(self.config)

    def validate(self, record: SkillRecord, body: Optional[str] = None) -> Validity:
        """
        Validate a record.

        Args:
            record: Parsed skill record.
            body: Document body. When given it is rescanned; otherwise the
                structure recorded by the parser is used.

        Returns:
            Validity carrying every violation found.
        """
        violations: List[Violation] = []

        self._check_name(record, violations)

        if body is not None:
            scan = scan_body(body)
            present = find_sections(scan, self.config.required_sections)
            examples = scan.code_blocks
        else:
            present = record.required_sections_present
            examples = record.code_example_count

        self._check_sections(present, violations)
        self._check_examples(examples, violations)
        self._check_versions(record, violations)

        return Validity.invalid(violations) if violations else Validity.ok()

    def validate_document(
        self,
        text: str,
        category: Optional[str] = None,
        source_path: Optional[str] = None,
    ) -> DocumentResult:
        """
        Parse and validate raw document text.

        Returns:
            DocumentResult with either parse errors or a validated record.
        """
        outcome = self.parser.parse(
            text,
            category=category or UNCATEGORIZED,
            source_path=source_path,
        )
        if not outcome.ok:
            return DocumentResult(source_path=source_path, parse_errors=list(outcome.errors))

        validity = self.validate(outcome.record, outcome.body)
        return DocumentResult(source_path=source_path, record=outcome.record.with_validity(validity))

    def validate_file(self, path: Path, category: Optional[str] = None) -> DocumentResult:
        """Parse and validate a SKILL.md file."""
        text = Path(path).read_text(encoding="utf-8")
        return self.validate_document(text, category=category, source_path=str(path))

    def _check_name(self, record: SkillRecord, violations: List[Violation]) -> None:
        if not self._name_pattern.match(record.name):
            violations.append(Violation(
                code=ViolationCode.INVALID_NAME,
                message=f"Name '{record.name}' must be lowercase and hyphen-separated",
                subject=record.name,
            ))

    def _check_sections(self, present: frozenset, violations: List[Violation]) -> None:
        for section in self.config.required_sections:
            if section not in present:
                violations.append(Violation(
                    code=ViolationCode.MISSING_SECTION,
                    message=f"Missing required section: {section}",
                    subject=section,
                ))

    def _check_examples(self, count: int, violations: List[Violation]) -> None:
        minimum = self.config.min_code_examples
        if count < minimum:
            violations.append(Violation(
                code=ViolationCode.TOO_FEW_EXAMPLES,
                message=f"Found {count} code example(s), at least {minimum} required",
                subject=str(count),
            ))

    def _check_versions(self, record: SkillRecord, violations: List[Violation]) -> None:
        version_range = record.version_range
        lower = try_parse_version(version_range.min)
        upper = try_parse_version(version_range.max)

        for label, raw, parsed in (("min", version_range.min, lower), ("max", version_range.max, upper)):
            if parsed is None:
                violations.append(Violation(
                    code=ViolationCode.MALFORMED_VERSION,
                    message=f"versions.{label} '{raw}' is not a version",
                    subject=raw,
                ))

        if lower is not None and upper is not None and is_inverted(lower, upper):
            violations.append(Violation(
                code=ViolationCode.INVERTED_RANGE,
                message=f"versions.min {version_range.min} is greater than versions.max {version_range.max}",
                subject=f"{version_range.min}..{version_range.max}",
            ))

        if not version_range.supported_versions:
            violations.append(Violation(
                code=ViolationCode.EMPTY_SUPPORTED_VERSIONS,
                message="versions.supported lists no versions",
            ))

        for entry in version_range.supported_versions:
            parsed = try_parse_version(entry)
            if parsed is None:
                violations.append(Violation(
                    code=ViolationCode.MALFORMED_VERSION,
                    message=f"Supported version '{entry}' is not a version",
                    subject=entry,
                ))
            elif lower is not None and upper is not None \
                    and bound_verdict(parsed, lower, upper) is not VersionVerdict.IN_RANGE:
                violations.append(Violation(
                    code=ViolationCode.UNSUPPORTED_OUT_OF_RANGE,
                    message=(
                        f"Supported version '{entry}' is outside "
                        f"[{version_range.min}, {version_range.max}]"
                    ),
                    subject=entry,
                ))


def validate_skill_md(path: Path, config: Optional[RegistryConfig] = None) -> DocumentResult:
    """
    Convenience function to validate a single SKILL.md file.

    Args:
        path: Path to the SKILL.md file.
        config: Optional registry configuration.

    Returns:
        DocumentResult for the file.
    """
    return ValidationEngine(config).validate_file(Path(path))
