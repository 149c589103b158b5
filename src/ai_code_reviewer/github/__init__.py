"""
GitHub Integration Layer

This module provides GitHub API integration for PR file retrieval,
diff position mapping, and review comment posting.
"""

from .client import GitHubClient, GitHubAPIError, RateLimitExceeded
from .parser import PRDiffParser, DiffLine, iter_diff_lines, position_of

__all__ = [
    'GitHubClient',
    'GitHubAPIError',
    'RateLimitExceeded',
    'PRDiffParser',
    'DiffLine',
    'iter_diff_lines',
    'position_of',
]
