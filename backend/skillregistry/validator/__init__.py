"""
Skill Registry Validation Engine.

Single-pass validation of parsed skill records:
- Name format (kebab-case)
- Required body sections
- Minimum number of fenced code examples
- Version range consistency
"""

from .engine import DocumentResult, ValidationEngine, validate_skill_md

__all__ = [
    "DocumentResult",
    "ValidationEngine",
    "validate_skill_md",
]
