"""
Review Pipeline

This module provides secret redaction, batching, static rule scanning,
finding merging, repository walking and the review orchestrator.
"""

from .redactor import Redactor, redact
from .chunker import chunk, format_diff_unit, FileUnitFormatter
from .scanner import StaticRule, StaticRuleScanner
from .merger import merge_findings
from .walker import PathFilter, RepositoryWalker
from .orchestrator import ReviewOrchestrator, ReviewMode

__all__ = [
    'Redactor',
    'redact',
    'chunk',
    'format_diff_unit',
    'FileUnitFormatter',
    'StaticRule',
    'StaticRuleScanner',
    'merge_findings',
    'PathFilter',
    'RepositoryWalker',
    'ReviewOrchestrator',
    'ReviewMode',
]
