"""
Repository Walker

Collects reviewable source files for full-repository review, applying
extension, directory and sensitive-file filters.
"""

import os
import fnmatch
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from ..models.source import SourceUnit


logger = logging.getLogger(__name__)


class PathFilter:
    """Decides which repository paths are eligible for review."""

    def __init__(
        self,
        include_extensions: Iterable[str],
        exclude_dirs: Iterable[str],
        exclude_files: Optional[Iterable[str]] = None
    ):
        self.include_extensions = tuple(ext.lower() for ext in include_extensions)
        self.exclude_dirs = set(exclude_dirs)
        self.exclude_files = list(exclude_files or [])

    def is_excluded_dir(self, name: str) -> bool:
        return name in self.exclude_dirs

    def is_sensitive(self, filename: str) -> bool:
        return any(fnmatch.fnmatch(filename, pattern) for pattern in self.exclude_files)

    def accepts(self, relative_path: str) -> bool:
        """Check a repository-relative path against all filters."""
        parts = Path(relative_path).parts
        if any(self.is_excluded_dir(part) for part in parts[:-1]):
            return False
        filename = parts[-1] if parts else relative_path
        if self.is_sensitive(filename):
            return False
        return filename.lower().endswith(self.include_extensions)


class RepositoryWalker:
    """
    Walks a repository tree in a stable order and reads eligible files.

    Excluded directories are pruned before descent. Files that cannot be
    read are logged and skipped.
    """

    def __init__(
        self,
        root: str,
        path_filter: PathFilter,
        max_files: int = 600,
        max_file_chars: Optional[int] = 20000
    ):
        """
        Initialize repository walker.

        Args:
            root: Repository root directory
            path_filter: Eligibility filter
            max_files: Maximum number of files collected
            max_file_chars: Per-file character cap; longer files are read up
                to one character past the cap so the formatter can mark the
                truncation (None reads whole files)
        """
        self.root = Path(root)
        self.path_filter = path_filter
        self.max_files = max_files
        self.max_file_chars = max_file_chars

    def iter_paths(self) -> Iterator[str]:
        """Yield eligible repository-relative paths in sorted walk order."""
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if not self.path_filter.is_excluded_dir(d))
            for filename in sorted(filenames):
                relative = Path(dirpath, filename).relative_to(self.root).as_posix()
                if self.path_filter.accepts(relative):
                    yield relative

    def _read(self, relative: str) -> str:
        path = self.root / relative
        if self.max_file_chars is None:
            return path.read_text(encoding='utf-8', errors='replace')

        if path.stat().st_size > self.max_file_chars:
            logger.warning(f"File {relative} exceeds {self.max_file_chars} bytes, reading at most {self.max_file_chars} chars")
        with path.open('r', encoding='utf-8', errors='replace') as f:
            return f.read(self.max_file_chars + 1)

    def collect(self) -> List[SourceUnit]:
        """
        Read eligible files, up to max_files, each capped at max_file_chars.

        Returns:
            SourceUnit list with file bodies; unreadable files are skipped
        """
        units: List[SourceUnit] = []

        for relative in self.iter_paths():
            if len(units) >= self.max_files:
                logger.warning(f"File limit reached ({self.max_files}), remaining files skipped")
                break
            try:
                body = self._read(relative)
            except OSError as e:
                logger.error(f"Failed to read file {relative}: {e}")
                continue
            units.append(SourceUnit(path=relative, body=body))

        logger.info(f"Collected {len(units)} file(s) under {self.root}")
        return units
