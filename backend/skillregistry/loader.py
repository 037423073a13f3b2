"""
Corpus loader.

Walks a registry root and yields the raw text of every skill document.
Each skill lives in its own folder; the folders above it form its
category, so ``<root>/forms/reactive/angular-reactive/SKILL.md`` belongs to
``forms/reactive`` and ``<root>/angular-signals/SKILL.md`` is uncategorized.
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .config import RegistryConfig
from .errors import CorpusReadError
from .models import UNCATEGORIZED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceDocument:
    """Raw text of one skill document and where it came from."""

    path: Path
    relative_path: str
    category: str
    text: str
    checksum: str


def category_for(relative_path: Path) -> str:
    """Category of a document given its path relative to the root."""
    folders = relative_path.parent.parts[:-1]
    if not folders:
        return UNCATEGORIZED
    return "/".join(folders)


def compute_checksum(data: bytes) -> str:
    """MD5 hex digest of document bytes."""
    return hashlib.md5(data).hexdigest()


def corpus_fingerprint(documents: Iterable[SourceDocument]) -> str:
    """Digest over the relative paths and checksums of ``documents``."""
    hasher = hashlib.md5()
    for document in sorted(documents, key=lambda d: d.relative_path):
        hasher.update(f"{document.relative_path}\0{document.checksum}\n".encode("utf-8"))
    return hasher.hexdigest()


class SkillLoader:
    """Reads skill documents from a directory tree in a stable order."""

    def __init__(self, root: Path, config: Optional[RegistryConfig] = None):
        self.root = Path(root)
        self.config = config or RegistryConfig()

    def discover(self) -> List[Path]:
        """
        Find every skill document under the root.

        Raises:
            CorpusReadError: If the root, or a directory below it, cannot be read.
        """
        if not self.root.is_dir():
            raise CorpusReadError(str(self.root), "not a readable directory")

        def _raise(error: OSError) -> None:
            raise CorpusReadError(error.filename or str(self.root), error.strerror or str(error))

        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_raise):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            if self.config.document_name in filenames:
                found.append(Path(dirpath) / self.config.document_name)
        return sorted(found)

    def iter_documents(self) -> Iterator[SourceDocument]:
        """
        Yield documents one at a time, reading each lazily.

        Raises:
            CorpusReadError: If a document cannot be read.
        """
        for path in self.discover():
            relative = path.relative_to(self.root)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise CorpusReadError(str(path), e.strerror or str(e)) from e

            document = SourceDocument(
                path=path,
                relative_path=relative.as_posix(),
                category=category_for(relative),
                text=data.decode("utf-8", errors="replace"),
                checksum=compute_checksum(data),
            )
            logger.debug(f"Read skill document {document.relative_path} ({document.checksum})")
            yield document

    def fingerprint(self) -> str:
        """
        Digest of the corpus: document paths and contents.

        Two calls return the same value if and only if no document was
        added, removed or changed in between.
        """
        return corpus_fingerprint(self.iter_documents())
