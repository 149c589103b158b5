"""
Markdown Report Formatter

Renders review results as GitHub-flavoured Markdown for the PR summary
comment, inline review comments, and the full-repository report.
"""

import re
import logging
from typing import List, Optional

from ..models.finding import Finding


logger = logging.getLogger(__name__)


NO_FINDINGS_LINE = "_No actionable findings._"
DEFAULT_SUMMARY = "Review completed."

SEVERITY_BADGES = {
    'high': '🔴',
    'medium': '🟠',
    'low': '🟡',
    'info': '🔵',
}


def _table_cell(text: Optional[str]) -> str:
    return (text or "").replace("\r", " ").replace("\n", " ").replace("|", "\\|")


def _code_block(text: str) -> str:
    """Fence text with a backtick run longer than any run inside it."""
    longest = max((len(run) for run in re.findall(r'`+', text)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}\n{text}\n{fence}"


class MarkdownFormatter:
    """
    Formats review findings into Markdown.

    Produces a single report with a findings table and a suggestions
    section, plus short bodies for inline review comments.
    """

    def __init__(self, max_comment_length: int = 65536):
        """
        Initialize Markdown formatter.

        Args:
            max_comment_length: GitHub's comment size limit
        """
        self.max_comment_length = max_comment_length

    def render(self, summary: Optional[str], findings: List[Finding], title: str = "AI Code Review") -> str:
        """
        Render a review report.

        Args:
            summary: Overall review summary
            findings: Merged findings in report order
            title: Report heading

        Returns:
            Markdown document
        """
        header = f"### 🤖 {title}\n**Summary:** {summary or DEFAULT_SUMMARY}\n\n"

        if not findings:
            return header + NO_FINDINGS_LINE

        rows = "\n".join(
            f"| {finding.severity.upper()} | `{finding.file or '-'}` | "
            f"{finding.line if finding.line is not None else '-'} | {_table_cell(finding.comment)} |"
            for finding in findings
        )
        body = f"| Severity | File | Line | Comment |\n|---|---|---|---|\n{rows}\n\n"

        suggestions = [
            f"**Suggestion {i} — {finding.file}:{finding.line if finding.line is not None else ''}**\n"
            + _code_block(finding.suggestion)
            for i, finding in enumerate((f for f in findings if f.suggestion), start=1)
        ]
        if suggestions:
            body += "---\n" + "\n\n".join(suggestions) + "\n"

        return self._truncate(header + body)

    def format_inline_comment(self, finding: Finding) -> str:
        """
        Format a finding as an inline review comment body.

        Args:
            finding: Finding anchored to a diff line

        Returns:
            Markdown comment body
        """
        badge = SEVERITY_BADGES.get(finding.severity, '')
        parts = [f"{badge} **{finding.severity.upper()}**: {finding.comment}".strip()]

        if finding.suggestion:
            parts.append(f"**Suggestion:**\n{_code_block(finding.suggestion)}")
        if finding.rule_id:
            parts.append(f"<sub>rule: `{finding.rule_id}`</sub>")

        return self._truncate("\n\n".join(parts))

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_comment_length:
            return text
        logger.warning(f"Comment exceeds {self.max_comment_length} chars, truncating")
        marker = "\n\n_... truncated_"
        return text[:self.max_comment_length - len(marker)] + marker

