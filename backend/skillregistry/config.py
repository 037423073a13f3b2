"""
Registry configuration.

Controls which sections a skill body must contain, how many code examples
are expected, and how trigger phrases are pulled out of descriptions.
Configuration can be loaded from a YAML file:

    required_sections:
      - When to Use
      - Critical Patterns
    min_code_examples: 3
    trigger_markers: ["Trigger:", "Use when:"]
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


DEFAULT_REQUIRED_SECTIONS = ["When to Use", "Critical Patterns"]

DEFAULT_TRIGGER_MARKERS = ["Trigger:", "Triggers:", "Use when:", "Activate when:"]

# Leading words stripped from each extracted trigger phrase
DEFAULT_LEAD_IN_WORDS = [
    "when",
    "whenever",
    "if",
    "using",
    "use",
    "working",
    "with",
    "on",
    "for",
    "writing",
    "creating",
    "implementing",
    "adding",
    "building",
]

NAME_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"


@dataclass
class RegistryConfig:
    """Settings shared by the parser, validation engine and loader."""

    required_sections: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_SECTIONS))
    min_code_examples: int = 3
    trigger_markers: List[str] = field(default_factory=lambda: list(DEFAULT_TRIGGER_MARKERS))
    lead_in_words: List[str] = field(default_factory=lambda: list(DEFAULT_LEAD_IN_WORDS))
    document_name: str = "SKILL.md"
    name_pattern: str = NAME_PATTERN

    def __post_init__(self) -> None:
        if not isinstance(self.min_code_examples, int) or isinstance(self.min_code_examples, bool):
            raise ValueError(f"min_code_examples must be an integer, got {self.min_code_examples!r}")
        if self.min_code_examples < 0:
            raise ValueError(f"min_code_examples must be >= 0, got {self.min_code_examples}")
        if not self.trigger_markers:
            raise ValueError("At least one trigger marker is required")
        if not self.document_name:
            raise ValueError("document_name must not be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration key(s): {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "RegistryConfig":
        """Load configuration from YAML content."""
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid configuration YAML: {e}") from e
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a YAML mapping")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Path) -> "RegistryConfig":
        """Load configuration from a file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_yaml(f.read())

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "RegistryConfig":
        """Load from ``path`` if given, otherwise return the defaults."""
        if path is None:
            return cls()
        return cls.from_file(Path(path))
