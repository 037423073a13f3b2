"""
Registry index snapshots.

A ``RegistryIndex`` is an immutable, fully built view over the valid records
of one corpus load: records keyed by unique name plus a category multimap.
Snapshots are never modified after construction; a reload builds a new one.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import DuplicateNameError
from .matcher import TriggerMatcher
from .models import SkillRecord
from .versions import Version, VersionRangeResolver, VersionVerdict, parse_version


@dataclass(frozen=True)
class NotFound:
    """Result of looking up a name the snapshot does not contain."""

    name: str

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class QueryResult:
    """One ranked entry of a query."""

    name: str
    category: str
    score: int
    version_verdict: Optional[VersionVerdict] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "score": self.score,
            "version_verdict": self.version_verdict.value if self.version_verdict else None,
        }


class RegistryIndex:
    """
    Immutable snapshot of valid skill records.

    Build one with ``RegistryIndex.build``; construction either completes
    or raises, so no caller can see a partially populated index.
    """

    def __init__(
        self,
        records: Mapping[str, SkillRecord],
        categories: Mapping[str, Tuple[str, ...]],
        fingerprint: Optional[str] = None,
        generation: int = 0,
    ):
        self._records = MappingProxyType(dict(records))
        self._categories = MappingProxyType(dict(categories))
        self.fingerprint = fingerprint
        self.generation = generation
        self._resolver = VersionRangeResolver()
        self._matcher = TriggerMatcher()

    @classmethod
    def empty(cls) -> "RegistryIndex":
        return cls({}, {})

    @classmethod
    def build(
        cls,
        records: Iterable[SkillRecord],
        fingerprint: Optional[str] = None,
        generation: int = 0,
    ) -> "RegistryIndex":
        """
        Assemble a snapshot from records.

        Args:
            records: Records to index, normally the valid ones of a load.
            fingerprint: Digest of the corpus the records came from.
            generation: Sequence number of the snapshot.

        Raises:
            DuplicateNameError: If two records share a name. Every duplicated
                name is reported, not only the first.
        """
        by_name: Dict[str, SkillRecord] = {}
        sources: Dict[str, List[str]] = defaultdict(list)
        for record in records:
            sources[record.name].append(record.source_path or "<unknown>")
            by_name.setdefault(record.name, record)

        duplicates = {name: paths for name, paths in sources.items() if len(paths) > 1}
        if duplicates:
            raise DuplicateNameError(duplicates)

        categories: Dict[str, List[str]] = defaultdict(list)
        for name in sorted(by_name):
            categories[by_name[name].category].append(name)

        return cls(
            by_name,
            {category: tuple(names) for category, names in categories.items()},
            fingerprint=fingerprint,
            generation=generation,
        )

    def by_name(self, name: str) -> Union[SkillRecord, NotFound]:
        """Look up a record; returns ``NotFound`` instead of raising."""
        record = self._records.get(name)
        if record is None:
            return NotFound(name)
        return record

    def by_category(self, category: str) -> Tuple[SkillRecord, ...]:
        """Records in ``category``, ordered by name."""
        return tuple(self._records[name] for name in self._categories.get(category, ()))

    def categories(self) -> List[str]:
        return sorted(self._categories)

    def names(self) -> List[str]:
        return sorted(self._records)

    def query(
        self,
        context: str,
        version: Optional[Union[str, Version]] = None,
        limit: Optional[int] = None,
        include_mismatches: bool = False,
    ) -> List[QueryResult]:
        """
        Rank records for a work context.

        Args:
            context: Free-text description of the work.
            version: Target framework version. When given, records whose
                range does not admit it are dropped unless
                ``include_mismatches`` is set, in which case they are kept
                with their verdict.
            limit: Maximum number of results.
            include_mismatches: Keep version mismatches in the result.

        Returns:
            Results ordered by score, then max version, then name.

        Raises:
            ValueError: If ``version`` is not a version.
        """
        target = parse_version(version) if version is not None else None

        results: List[QueryResult] = []
        for match in self._matcher.rank(context, self._records.values()):
            if limit is not None and len(results) >= limit:
                break
            verdict = None
            if target is not None:
                verdict = self._resolver.resolve(match.record.version_range, target)
                if not verdict.is_match and not include_mismatches:
                    continue
            results.append(QueryResult(
                name=match.record.name,
                category=match.record.category,
                score=match.score,
                version_verdict=verdict,
            ))
        return results

    def stats(self) -> Dict[str, Any]:
        """Summary counts for the snapshot."""
        return {
            "generation": self.generation,
            "fingerprint": self.fingerprint,
            "total_skills": len(self._records),
            "categories": {c: len(names) for c, names in sorted(self._categories.items())},
        }

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[SkillRecord]:
        return iter(self._records[name] for name in sorted(self._records))

    def __repr__(self) -> str:
        return f"RegistryIndex(generation={self.generation}, skills={len(self._records)})"
