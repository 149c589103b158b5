"""
PR Diff Parser

Walks unified-diff patches line by line, maps new-file line numbers to
diff positions for inline review comments, and converts GitHub PR file
listings into source units.
"""

import re
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from ..models.source import SourceUnit


logger = logging.getLogger(__name__)


HUNK_HEADER_PATTERN = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
BINARY_FILE_PATTERN = re.compile(r'Binary files? .* differ')


@dataclass(frozen=True)
class DiffLine:
    """A single line of a unified diff with its addressing information."""
    position: int
    kind: str  # 'header', 'context', 'added', 'removed', 'meta'
    new_line: Optional[int]
    content: str


def _split_lines(diff_text: str) -> List[str]:
    lines = diff_text.split('\n')
    if lines and lines[-1] == '' and diff_text.endswith('\n'):
        lines.pop()
    return lines


def iter_diff_lines(diff_text: str) -> Iterator[DiffLine]:
    """
    Walk a unified diff, yielding every line with its diff position.

    Every line counts toward the 1-based position. Hunk headers reset the
    running new-file line number; context and added lines carry the current
    new-file line and advance it; removed lines carry none.

    Args:
        diff_text: Unified diff text for a single file

    Yields:
        DiffLine for each line of the diff
    """
    if not isinstance(diff_text, str) or not diff_text:
        return

    new_line: Optional[int] = None

    for position, line in enumerate(_split_lines(diff_text), start=1):
        header_match = HUNK_HEADER_PATTERN.match(line)
        if header_match:
            new_line = int(header_match.group(3))
            yield DiffLine(position, 'header', None, line)
            continue

        # Before the first hunk header (file headers) or "\ No newline" markers
        if new_line is None or line.startswith('\\'):
            yield DiffLine(position, 'meta', None, line)
            continue

        if line.startswith('-'):
            yield DiffLine(position, 'removed', None, line[1:])
            continue

        if line.startswith('+'):
            yield DiffLine(position, 'added', new_line, line[1:])
        else:
            yield DiffLine(position, 'context', new_line, line[1:] if line.startswith(' ') else line)
        new_line += 1


def position_of(diff_text: str, target_new_line: int) -> Optional[int]:
    """
    Compute the diff position of a new-file line.

    Args:
        diff_text: Unified diff text for a single file
        target_new_line: Line number in the new version of the file

    Returns:
        1-based position within the diff, or None when the line is not
        part of the diff's added/context lines
    """
    if isinstance(target_new_line, bool) or not isinstance(target_new_line, int) or target_new_line < 1:
        return None

    for diff_line in iter_diff_lines(diff_text):
        if diff_line.kind in ('added', 'context') and diff_line.new_line == target_new_line:
            return diff_line.position

    return None


class PRDiffParser:
    """
    Parser for GitHub PR file listings.

    Converts GitHub API file entries into SourceUnit objects and keeps
    the raw patches addressable by path for inline comment placement.
    """

    def parse_files(self, files_data: List[Dict]) -> List[SourceUnit]:
        """
        Convert PR file entries into source units.

        Args:
            files_data: List of file entries from the pull request files API

        Returns:
            SourceUnit list in listing order; binary or too-large files
            keep an empty patch
        """
        units = []

        for file_data in files_data:
            filename = file_data.get('filename')
            if not filename:
                logger.debug("Skipping PR file entry without filename")
                continue

            patch = file_data.get('patch') or None
            if patch and BINARY_FILE_PATTERN.search(patch):
                logger.debug(f"Skipping binary diff for {filename}")
                patch = None

            units.append(SourceUnit(path=filename, patch=patch))

        logger.info(f"Parsed {len(units)} PR files, {sum(1 for u in units if u.has_patch)} with textual patches")
        return units
