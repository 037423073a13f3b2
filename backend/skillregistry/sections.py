"""
Skill Body Scanner

Finds markdown headings and fenced code blocks in a SKILL.md body.

Scanning rules:
1. Headings are ATX style (# to ######); headings inside fences are ignored
2. A fence opens with ``` or ~~~ and closes with the same character repeated
   at least as many times
3. Only closed fences count as code examples
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Set


HEADING_PATTERN = re.compile(r"^ {0,3}(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")


@dataclass
class Heading:
    """A heading found in the body."""
    text: str
    level: int
    line_number: int


@dataclass
class BodyScan:
    """Structural summary of a skill body."""
    headings: List[Heading] = field(default_factory=list)
    code_blocks: int = 0
    unclosed_fence: bool = False

    def heading_names(self) -> Set[str]:
        return {normalize_section_name(h.text) for h in self.headings}


def normalize_section_name(name: str) -> str:
    """Case-insensitive, whitespace-trimmed form used to compare headers."""
    return name.strip().casefold()


def scan_body(body: str) -> BodyScan:
    """
    Scan a markdown body for headings and fenced code blocks.

    Args:
        body: Markdown text following the front matter

    Returns:
        BodyScan with headings and the number of closed code fences
    """
    scan = BodyScan()
    open_fence: Optional[str] = None

    for i, line in enumerate(body.split("\n"), 1):
        fence = FENCE_PATTERN.match(line)
        if open_fence is not None:
            # Closing fence: same character, at least as long, no info string
            if fence and fence.group(1)[0] == open_fence[0] \
                    and len(fence.group(1)) >= len(open_fence) \
                    and not fence.group(2).strip():
                scan.code_blocks += 1
                open_fence = None
            continue

        if fence:
            # Backtick fences may not carry backticks in the info string
            if fence.group(1)[0] == "`" and "`" in fence.group(2):
                continue
            open_fence = fence.group(1)
            continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            scan.headings.append(Heading(
                text=heading.group(2).strip(),
                level=len(heading.group(1)),
                line_number=i,
            ))

    scan.unclosed_fence = open_fence is not None
    return scan


def find_sections(scan: BodyScan, section_names: Iterable[str]) -> FrozenSet[str]:
    """Return the canonical names from ``section_names`` present in ``scan``."""
    present = scan.heading_names()
    return frozenset(
        name for name in section_names
        if normalize_section_name(name) in present
    )
