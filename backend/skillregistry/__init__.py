"""
Skill Registry: parse, validate, index and match skill documents.

This package loads SKILL.md documents (YAML front matter plus a markdown
body) from a directory tree, validates them, publishes the valid ones as an
immutable index snapshot and ranks them against a work context and target
framework version.
"""

from .config import RegistryConfig
from .errors import CorpusReadError, DuplicateNameError, RebuildCancelled, SkillRegistryError
from .index import NotFound, QueryResult, RegistryIndex
from .matcher import Match, TriggerMatcher
from .models import SkillRecord, Validity, VersionRange, Violation, ViolationCode
from .parser import MetadataParser, ParseError, ParseErrorKind, ParseOutcome
from .registry import SkillRegistry, validate
from .report import BuildReport
from .validator import DocumentResult, ValidationEngine
from .versions import Version, VersionRangeResolver, VersionVerdict

__version__ = "1.0.0"
__all__ = [
    "RegistryConfig",
    "SkillRegistryError",
    "DuplicateNameError",
    "CorpusReadError",
    "RebuildCancelled",
    "NotFound",
    "QueryResult",
    "RegistryIndex",
    "Match",
    "TriggerMatcher",
    "SkillRecord",
    "Validity",
    "VersionRange",
    "Violation",
    "ViolationCode",
    "MetadataParser",
    "ParseError",
    "ParseErrorKind",
    "ParseOutcome",
    "SkillRegistry",
    "validate",
    "BuildReport",
    "DocumentResult",
    "ValidationEngine",
    "Version",
    "VersionRangeResolver",
    "VersionVerdict",
]
