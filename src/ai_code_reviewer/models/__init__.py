"""
Data Models

AI Code Reviewer 시스템의 핵심 데이터 모델들
"""

from .source import SourceUnit, Batch
from .finding import (
    Finding,
    ReviewResult,
    FindingPayload,
    ReviewPayload,
    SEVERITIES,
    COMMENT_KEY_PREFIX,
)

__all__ = [
    "SourceUnit",
    "Batch",
    "Finding",
    "ReviewResult",
    "FindingPayload",
    "ReviewPayload",
    "SEVERITIES",
    "COMMENT_KEY_PREFIX",
]
