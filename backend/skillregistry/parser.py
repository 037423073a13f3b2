"""
Metadata Parser for skill documents.

Turns the raw text of one SKILL.md document into a ``SkillRecord``, or into
the complete list of problems that prevented it. A document looks like:

    ---
    name: angular-signals
    description: >
      Signal-based state in Angular components.
      Trigger: When using signals, computed state, or two-way binding.
    versions:
      min: 16.0.0
      max: 21.0.0
      supported: [16, 17, 18, 19, 20, 21]
    ---
    ## When to Use
    ...
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .config import RegistryConfig
from .models import UNCATEGORIZED, SkillRecord, VersionRange
from .sections import find_sections, scan_body


FRONT_MATTER_PATTERN = re.compile(
    r"\A\ufeff?---[ \t]*\n(?P<yaml>.*?)^---[ \t]*$\n?",
    re.DOTALL | re.MULTILINE,
)

VERSION_BLOCK_KEYS = ("versions", "version")
SUPPORTED_KEYS = ("supported", "supported_versions", "supportedVersions")

# Separators between trigger phrases inside a trigger clause
_PHRASE_SPLIT = re.compile(r"[,;]|(?<!\S)(?:or|and)(?!\S)", re.IGNORECASE)
_SENTENCE_END = re.compile(r"[.!?](?=\s|$)")
_EDGE_PUNCTUATION = " \t.:!?\"'`()[]"


class ParseErrorKind(str, Enum):
    """Kinds of parse failures."""

    MISSING_FRONT_MATTER = "missing_front_matter"
    MALFORMED_STRUCTURED_DATA = "malformed_structured_data"
    MISSING_REQUIRED_FIELD = "missing_required_field"


@dataclass(frozen=True)
class ParseError:
    """Represents a parsing error."""

    kind: ParseErrorKind
    message: str
    field: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "field": self.field}


@dataclass(frozen=True)
class ParseOutcome:
    """Either a parsed record with its body, or the errors that prevented it."""

    record: Optional[SkillRecord] = None
    body: str = ""
    errors: Tuple[ParseError, ...] = ()
    source_path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @property
    def missing_fields(self) -> List[str]:
        return [
            e.field for e in self.errors
            if e.kind is ParseErrorKind.MISSING_REQUIRED_FIELD and e.field
        ]


def _missing(field_name: str) -> ParseError:
    return ParseError(
        kind=ParseErrorKind.MISSING_REQUIRED_FIELD,
        message=f"Missing required field: {field_name}",
        field=field_name,
    )


def _malformed(message: str, field_name: Optional[str] = None) -> ParseError:
    return ParseError(
        kind=ParseErrorKind.MALFORMED_STRUCTURED_DATA,
        message=message,
        field=field_name,
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _first_key(data: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[str]:
    for key in keys:
        if key in data:
            return key
    return None


def _as_written(raw_block: Dict[str, Any], key: str, typed: str) -> str:
    value = raw_block.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return typed


class MetadataParser:
    """
    Parser for SKILL.md front matter.

    Parsing is pure: the same text, category and source path always give an
    equal outcome. Missing required fields are all collected before returning.
    """

    def __init__(self, config: Optional[RegistryConfig] = None):
        self.config = config or RegistryConfig()
        markers = sorted(self.config.trigger_markers, key=len, reverse=True)
        self._clause_pattern = re.compile(
            r"(?:^|(?<=[.!?])[ \t]+)[ \t]*(?:"
            + "|".join(re.escape(m) for m in markers)
            + r")(?P<clause>[^\n]*)",
            re.IGNORECASE | re.MULTILINE,
        )
        self._lead_in = {w.casefold() for w in self.config.lead_in_words}

    def parse(
        self,
        text: str,
        category: str = UNCATEGORIZED,
        source_path: Optional[str] = None,
    ) -> ParseOutcome:
        """
        Parse one document.

        Args:
            text: Raw document text.
            category: Grouping path for the record.
            source_path: Where the text came from, for reporting.

        Returns:
            ParseOutcome with a record, or with every error found.
        """
        normalized = text.replace("\r\n", "\n")
        match = FRONT_MATTER_PATTERN.match(normalized)
        if not match:
            return ParseOutcome(
                errors=(ParseError(
                    kind=ParseErrorKind.MISSING_FRONT_MATTER,
                    message="Missing front matter block (--- ... ---)",
                ),),
                source_path=source_path,
            )

        try:
            data = yaml.safe_load(match.group("yaml"))
            # Untyped view keeps version scalars as written ("16.10" is not 16.1)
            raw = yaml.load(match.group("yaml"), Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            return ParseOutcome(
                errors=(_malformed(f"YAML parse error: {e}"),),
                source_path=source_path,
            )

        if data is None:
            data = {}
        if not isinstance(data, dict):
            return ParseOutcome(
                errors=(_malformed(f"Front matter must be a mapping, got {type(data).__name__}"),),
                source_path=source_path,
            )

        errors: List[ParseError] = []

        name = self._scalar(data, "name", "name", errors)
        description = self._scalar(data, "description", "description", errors)

        triggers: Tuple[str, ...] = ()
        if description is not None:
            triggers = self.extract_triggers(description)
            if not triggers:
                errors.append(_missing("description.trigger"))

        version_range = self._version_range(data, raw, errors)

        if errors:
            return ParseOutcome(errors=tuple(errors), source_path=source_path)

        body = normalized[match.end():]
        scan = scan_body(body)
        record = SkillRecord(
            name=name,
            description=description,
            triggers=triggers,
            version_range=version_range,
            category=category or UNCATEGORIZED,
            required_sections_present=find_sections(scan, self.config.required_sections),
            code_example_count=scan.code_blocks,
            source_path=source_path,
            checksum=hashlib.md5(text.encode("utf-8")).hexdigest(),
        )
        return ParseOutcome(record=record, body=body, source_path=source_path)

    def find_trigger_clause(self, description: str) -> Optional[str]:
        """
        Locate the trigger clause in a description.

        The clause starts after a trigger marker that opens a line or follows
        the end of a sentence, and runs to the end of that sentence or line.
        """
        match = self._clause_pattern.search(description)
        if not match:
            return None
        clause = match.group("clause")
        return _SENTENCE_END.split(clause, maxsplit=1)[0].strip()

    def extract_triggers(self, description: str) -> Tuple[str, ...]:
        """Extract normalized trigger phrases, in order and without duplicates."""
        clause = self.find_trigger_clause(description)
        if not clause:
            return ()

        phrases: List[str] = []
        for piece in _PHRASE_SPLIT.split(clause):
            phrase = self._normalize_phrase(piece)
            if phrase and phrase not in phrases:
                phrases.append(phrase)
        return tuple(phrases)

    def _normalize_phrase(self, piece: str) -> str:
        tokens = piece.casefold().strip(_EDGE_PUNCTUATION).split()
        while tokens and tokens[0] in self._lead_in:
            tokens.pop(0)
        return " ".join(tokens).strip(_EDGE_PUNCTUATION)

    def _scalar(
        self,
        data: Dict[str, Any],
        key: str,
        field_name: str,
        errors: List[ParseError],
    ) -> Optional[str]:
        """Read a required scalar, recording a missing or malformed error."""
        value = data.get(key)
        if _is_blank(value):
            errors.append(_missing(field_name))
            return None
        if isinstance(value, (dict, list)):
            errors.append(_malformed(f"Field '{field_name}' must be a scalar", field_name))
            return None
        return str(value).strip()

    def _version_range(
        self,
        data: Dict[str, Any],
        raw: Any,
        errors: List[ParseError],
    ) -> Optional[VersionRange]:
        block_key = _first_key(data, VERSION_BLOCK_KEYS)
        block = data.get(block_key) if block_key else None
        raw_block = raw.get(block_key) if block_key and isinstance(raw, dict) else None
        if not isinstance(raw_block, dict):
            raw_block = {}
        if block is None:
            block = {}
        elif not isinstance(block, dict):
            errors.append(_malformed(f"Field '{block_key}' must be a mapping", "versions"))
            return None

        start = len(errors)
        v_min = self._scalar(block, "min", "versions.min", errors)
        v_max = self._scalar(block, "max", "versions.max", errors)

        supported_key = _first_key(block, SUPPORTED_KEYS)
        supported = block.get(supported_key) if supported_key else None
        supported_versions: Tuple[str, ...] = ()
        if supported is None:
            errors.append(_missing("versions.supported"))
        elif not isinstance(supported, list):
            errors.append(_malformed("Field 'versions.supported' must be a list", "versions.supported"))
        elif any(isinstance(v, (dict, list)) or v is None for v in supported):
            errors.append(_malformed("Entries of 'versions.supported' must be scalars", "versions.supported"))
        else:
            supported_versions = tuple(str(v).strip() for v in supported)

        if len(errors) > start:
            return None

        raw_supported = raw_block.get(supported_key)
        if isinstance(raw_supported, list) and len(raw_supported) == len(supported_versions):
            supported_versions = tuple(str(v).strip() for v in raw_supported)
        return VersionRange(
            min=_as_written(raw_block, "min", v_min),
            max=_as_written(raw_block, "max", v_max),
            supported_versions=supported_versions,
        )
