"""
Shared fixtures for Skill Registry tests.
"""

from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

from backend.skillregistry.models import SkillRecord, VersionRange


SUPPORTED = (16, 17, 18, 19, 20, 21)


def skill_md(
    name: Optional[str] = "angular-signals",
    summary: str = "Signal-based state in Angular components.",
    trigger: Optional[str] = "Trigger: When using signals, computed state, or two-way binding.",
    vmin: Optional[str] = "16.0.0",
    vmax: Optional[str] = "21.0.0",
    supported: Optional[Sequence] = SUPPORTED,
    sections: Sequence[str] = ("When to Use", "Critical Patterns"),
    examples: int = 3,
) -> str:
    """Return the text of a SKILL.md document; None drops a field."""
    lines = ["---"]
    if name is not None:
        lines.append(f"name: {name}")
    lines.append("description: |")
    lines.append(f"  {summary}")
    if trigger:
        lines.append(f"  {trigger}")
    if vmin is not None or vmax is not None or supported is not None:
        lines.append("versions:")
        if vmin is not None:
            lines.append(f'  min: "{vmin}"')
        if vmax is not None:
            lines.append(f'  max: "{vmax}"')
        if supported is not None:
            lines.append(f"  supported: [{', '.join(str(v) for v in supported)}]")
    lines.append("---")
    lines.append("")
    lines.append(f"# {name or 'Skill'}")
    lines.append("")
    for section in sections:
        lines.extend([f"## {section}", "", f"Guidance for {section.lower()}.", ""])
    for i in range(examples):
        lines.extend(["```typescript", f"const example{i} = signal({i});", "```", ""])
    return "\n".join(lines)


@pytest.fixture
def make_skill_md() -> Callable[..., str]:
    """Factory for SKILL.md document text."""
    return skill_md


@pytest.fixture
def make_record() -> Callable[..., SkillRecord]:
    """Factory for SkillRecord instances."""

    def _make(
        name: str,
        triggers: Sequence[str] = ("signals",),
        vmin: str = "16.0.0",
        vmax: str = "21.0.0",
        supported: Sequence[str] = ("16", "17", "18", "19", "20", "21"),
        category: str = "uncategorized",
        source_path: Optional[str] = None,
    ) -> SkillRecord:
        return SkillRecord(
            name=name,
            description=f"{name} skill.\nTrigger: {', '.join(triggers)}",
            triggers=tuple(triggers),
            version_range=VersionRange(min=vmin, max=vmax, supported_versions=tuple(supported)),
            category=category,
            source_path=source_path or f"{name}/SKILL.md",
        )

    return _make


@pytest.fixture
def skills_root(tmp_path: Path) -> Path:
    """Empty registry root directory."""
    root = tmp_path / "skills"
    root.mkdir()
    return root


@pytest.fixture
def write_skill(skills_root: Path) -> Callable[..., Path]:
    """Write a SKILL.md under ``skills_root/<relative_dir>``; returns its path."""

    def _write(relative_dir: str, text: Optional[str] = None, **kwargs) -> Path:
        directory = skills_root / relative_dir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "SKILL.md"
        path.write_text(text if text is not None else skill_md(**kwargs), encoding="utf-8")
        return path

    return _write
