"""
Review Formatter

This module provides Markdown rendering for review reports and inline
comments, and writing of review artifacts.
"""

from .markdown import MarkdownFormatter, NO_FINDINGS_LINE
from .artifacts import write_artifacts, append_step_summary

__all__ = [
    'MarkdownFormatter',
    'NO_FINDINGS_LINE',
    'write_artifacts',
    'append_step_summary',
]
