"""
Batch Chunker

Partitions source units into ordered batches bounded by a character budget.
A unit's formatted text is never split across two batches; a unit larger
than the budget becomes a batch of its own.
"""

import logging
from typing import Callable, Iterable, List, Optional

from ..models.source import SourceUnit, Batch


logger = logging.getLogger(__name__)


Formatter = Callable[[SourceUnit], Optional[str]]

TRUNCATION_MARKER = "\n... [truncated]"


def format_diff_unit(unit: SourceUnit) -> Optional[str]:
    """
    Format a PR file as a unified-diff block.

    Args:
        unit: Source unit carrying a patch

    Returns:
        Diff block with file headers, or None for binary/too-large files
    """
    if not unit.patch:
        return None
    return f"--- a/{unit.path}\n+++ b/{unit.path}\n{unit.patch}\n\n"


class FileUnitFormatter:
    """Formats whole files for full-repository review, truncating long bodies."""

    def __init__(self, max_file_chars: int = 20000):
        if max_file_chars < 1:
            raise ValueError("max_file_chars must be positive")
        self.max_file_chars = max_file_chars

    def __call__(self, unit: SourceUnit) -> Optional[str]:
        body = unit.body or ""
        if not body.strip():
            return None
        if len(body) > self.max_file_chars:
            body = body[:self.max_file_chars] + TRUNCATION_MARKER
        return f"\n// ===== FILE: {unit.path} =====\n{body}"


def chunk(units: Iterable[SourceUnit], max_batch_chars: int, formatter: Formatter) -> List[Batch]:
    """
    Group formatted units into size-bounded batches.

    Args:
        units: Source units in encounter order
        max_batch_chars: Character budget per batch
        formatter: Renders a unit, returning None/empty to skip it

    Returns:
        Batches in input order; every batch is within the budget unless it
        holds exactly one oversized unit
    """
    if max_batch_chars < 1:
        raise ValueError("max_batch_chars must be positive")

    batches: List[Batch] = []
    current = Batch(index=0)

    for unit in units:
        formatted = formatter(unit)
        if not formatted:
            logger.debug(f"Skipping {unit.path}: nothing to review")
            continue

        if not current.is_empty and current.length + len(formatted) > max_batch_chars:
            batches.append(current)
            current = Batch(index=len(batches))

        if len(formatted) > max_batch_chars:
            logger.debug(f"{unit.path} exceeds batch budget ({len(formatted)} > {max_batch_chars})")

        current.append(unit.path, formatted)

    if not current.is_empty:
        batches.append(current)

    logger.info(f"Built {len(batches)} batch(es) with budget {max_batch_chars}")
    return batches
