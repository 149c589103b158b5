"""
Review Artifacts

Writes the JSON and Markdown review reports and appends to the CI job
summary.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from ..models.finding import ReviewResult


logger = logging.getLogger(__name__)


PathLike = Union[str, Path]


def write_artifacts(result: ReviewResult, markdown: str, json_path: PathLike, markdown_path: PathLike) -> None:
    """
    Write {summary, findings} as JSON and the rendered report as Markdown.

    Args:
        result: Review result to serialize
        markdown: Rendered Markdown report
        json_path: Destination of the JSON report
        markdown_path: Destination of the Markdown report
    """
    json_file = Path(json_path)
    markdown_file = Path(markdown_path)

    for target in (json_file, markdown_file):
        target.parent.mkdir(parents=True, exist_ok=True)

    json_file.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding='utf-8')
    markdown_file.write_text(markdown, encoding='utf-8')

    logger.info(f"Wrote review artifacts to {json_file} and {markdown_file}")


def append_step_summary(markdown: str, step_summary_path: Optional[PathLike]) -> bool:
    """
    Append the report to the CI job summary file.

    Args:
        markdown: Rendered Markdown report
        step_summary_path: Path from GITHUB_STEP_SUMMARY, if any

    Returns:
        True when the summary was written
    """
    if not step_summary_path:
        return False

    try:
        with open(step_summary_path, 'a', encoding='utf-8') as f:
            f.write(markdown + "\n")
    except OSError as e:
        logger.warning(f"Failed to append job summary to {step_summary_path}: {e}")
        return False

    logger.debug(f"Appended report to job summary {step_summary_path}")
    return True
