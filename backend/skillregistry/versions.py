"""
Version parsing and range resolution.

Skill documents declare a ``[min, max]`` range in full semver and a list of
supported versions that is usually written as bare majors ("19"). Both are
handled by one rule: a version written with k components stands for every
version sharing those k leading components. Comparisons between two versions
therefore only look at the components both of them spell out.

    >>> resolver = VersionRangeResolver()
    >>> resolver.resolve(VersionRange(min="15.0.0", max="21.0.0",
    ...                               supported_versions=("19",)), "19.2.1")
    <VersionVerdict.IN_RANGE: 'in_range'>
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .models import VersionRange


_VERSION_PATTERN = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?(?:[-+][0-9A-Za-z.+-]*)?$",
    re.IGNORECASE,
)


@dataclass(frozen=True, order=True)
class Version:
    """A major.minor.patch version that remembers how many parts were written."""

    major: int
    minor: int = 0
    patch: int = 0
    precision: int = field(default=3, compare=False)

    @classmethod
    def parse(cls, value: Union[str, int, float]) -> "Version":
        """
        Parse a version identifier.

        Args:
            value: "19", "19.2", "19.2.1", "v19.2.1-rc.1" or a YAML number.

        Raises:
            ValueError: If the value is not a version.
        """
        if isinstance(value, bool):
            raise ValueError(f"Not a version: {value!r}")
        text = str(value).strip()
        match = _VERSION_PATTERN.match(text)
        if not match:
            raise ValueError(f"Not a version: {value!r}")
        parts = [match.group("major"), match.group("minor"), match.group("patch")]
        precision = sum(1 for p in parts if p is not None)
        major, minor, patch = (int(p) if p is not None else 0 for p in parts)
        return cls(major=major, minor=minor, patch=patch, precision=precision)

    @property
    def components(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def prefix(self, length: int) -> Tuple[int, ...]:
        return self.components[:length]

    def __str__(self) -> str:
        return ".".join(str(c) for c in self.components[: self.precision])


def parse_version(value: Union[str, int, float, Version]) -> Version:
    """Parse ``value`` unless it is already a Version."""
    if isinstance(value, Version):
        return value
    return Version.parse(value)


def try_parse_version(value: Union[str, int, float, Version, None]) -> Optional[Version]:
    """Like ``parse_version`` but returns None for unparseable input."""
    if value is None:
        return None
    try:
        return parse_version(value)
    except ValueError:
        return None


def versions_match(a: Version, b: Version) -> bool:
    """True if ``a`` and ``b`` agree on every component both specify."""
    length = min(a.precision, b.precision)
    return a.prefix(length) == b.prefix(length)


class VersionVerdict(str, Enum):
    """Outcome of checking a query version against a version range."""

    IN_RANGE = "in_range"
    BELOW_MIN = "below_min"
    ABOVE_MAX = "above_max"
    NOT_IN_SUPPORTED_LIST = "not_in_supported_list"

    @property
    def is_match(self) -> bool:
        return self is VersionVerdict.IN_RANGE


def is_inverted(lower: Version, upper: Version) -> bool:
    """True if ``lower`` sorts after ``upper`` on the components both specify."""
    length = min(lower.precision, upper.precision)
    return lower.prefix(length) > upper.prefix(length)


def bound_verdict(version: Version, lower: Version, upper: Version) -> VersionVerdict:
    """Place ``version`` relative to ``[lower, upper]`` ignoring any supported list."""
    low_len = min(version.precision, lower.precision)
    if version.prefix(low_len) < lower.prefix(low_len):
        return VersionVerdict.BELOW_MIN
    high_len = min(version.precision, upper.precision)
    if version.prefix(high_len) > upper.prefix(high_len):
        return VersionVerdict.ABOVE_MAX
    return VersionVerdict.IN_RANGE


class VersionRangeResolver:
    """Answers membership queries against a skill's declared version range."""

    def resolve(
        self,
        version_range: VersionRange,
        query: Union[str, int, Version],
    ) -> VersionVerdict:
        """
        Check ``query`` against ``version_range``.

        Bounds are checked first; a version inside the bounds must also
        match an entry of the supported list.

        Raises:
            ValueError: If the query or the range bounds cannot be parsed.
        """
        version = parse_version(query)
        lower = parse_version(version_range.min)
        upper = parse_version(version_range.max)

        verdict = bound_verdict(version, lower, upper)
        if verdict is not VersionVerdict.IN_RANGE:
            return verdict

        for entry in version_range.supported_versions:
            supported = try_parse_version(entry)
            if supported is not None and versions_match(version, supported):
                return VersionVerdict.IN_RANGE
        return VersionVerdict.NOT_IN_SUPPORTED_LIST
