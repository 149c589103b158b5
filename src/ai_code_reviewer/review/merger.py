"""
Finding Merger

Deduplicates findings from several sources by their identity key.
"""

import logging
from typing import Iterable, List, Set, Tuple, Optional

from ..models.finding import Finding


logger = logging.getLogger(__name__)


def merge_findings(*finding_lists: Iterable[Finding]) -> List[Finding]:
    """
    Merge finding lists, keeping the first occurrence of each identity.

    The first occurrence fixes the output position; later duplicates are
    dropped without merging any of their fields.

    Args:
        *finding_lists: Finding sequences in priority order

    Returns:
        Ordered unique findings
    """
    seen: Set[Tuple[str, Optional[int], str, str]] = set()
    merged: List[Finding] = []
    dropped = 0

    for findings in finding_lists:
        for finding in findings:
            key = finding.identity
            if key in seen:
                dropped += 1
                continue
            seen.add(key)
            merged.append(finding)

    if dropped:
        logger.debug(f"Dropped {dropped} duplicate finding(s)")
    return merged
