"""
Model Response Parser

Extracts a JSON object from free-form model output and coerces it into
internal Finding objects. Model output is untrusted and may be malformed.
"""

import re
import json
import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from ..models.finding import Finding, FindingPayload, ReviewPayload


logger = logging.getLogger(__name__)


FENCED_BLOCK_PATTERN = re.compile(r'```(?:json)?[ \t]*\n?(.*?)```', re.S | re.I)


def _try_loads(candidate: str) -> Optional[Any]:
    try:
        return json.loads(candidate)
    except (ValueError, TypeError, RecursionError) as e:
        logger.debug(f"JSON decode failed: {e}")
        return None


def extract_json(text: Any) -> Optional[Any]:
    """
    Extract one JSON value from model output.

    Tries, in order: the whole text, the interior of the first fenced code
    block (optionally labelled json), and the span from the first '{' to
    the last '}' inclusive.

    Args:
        text: Raw model reply

    Returns:
        Parsed JSON value, or None when the input is empty, not text, or
        no strategy succeeds
    """
    if not isinstance(text, str) or not text.strip():
        return None

    parsed = _try_loads(text.strip())
    if parsed is not None:
        return parsed

    fenced = FENCED_BLOCK_PATTERN.search(text)
    if fenced:
        parsed = _try_loads(fenced.group(1).strip())
        if parsed is not None:
            return parsed

    start = text.find('{')
    end = text.rfind('}')
    if start != -1 and end > start:
        parsed = _try_loads(text[start:end + 1])
        if parsed is not None:
            return parsed

    logger.debug(f"No JSON found in model reply: {text[:200]!r}")
    return None


def parse_review_response(
    text: Any,
    fallback_summary: Optional[str] = None
) -> Tuple[List[Finding], Optional[str], bool]:
    """
    Parse a batch reply into findings and a summary.

    Args:
        text: Raw model reply
        fallback_summary: Summary used when the reply has none or is unusable
            (None leaves a missing summary missing)

    Returns:
        Tuple of (findings, summary, ok) where ok is False when no JSON
        object could be extracted
    """
    data = extract_json(text)
    if not isinstance(data, dict):
        return [], fallback_summary, False

    try:
        payload = ReviewPayload.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Review payload rejected: {e}")
        return [], fallback_summary, False

    findings: List[Finding] = []
    for entry in payload.findings:
        if not isinstance(entry, dict):
            continue
        try:
            item = FindingPayload.model_validate(entry)
            findings.append(item.to_finding())
        except (ValidationError, ValueError) as e:
            logger.debug(f"Dropping malformed finding: {e}")

    return findings, payload.summary or fallback_summary, True
