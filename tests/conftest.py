"""
Shared fixtures for AI Code Reviewer tests.
"""

import pytest
from unittest.mock import Mock

from ai_code_reviewer.config import AppConfig, ModelConfig, GitHubConfig, ReviewConfig, OutputConfig
from ai_code_reviewer.github.client import GitHubClient
from ai_code_reviewer.llm.client import ModelClient


SAMPLE_PATCH = "@@ -1,3 +1,4 @@\n context\n+added1\n+added2\n context2"

SECRET_PATCH = (
    "@@ -1,2 +1,3 @@\n"
    " const express = require('express');\n"
    "+const PASSWORD = 'super-secret-123';\n"
    " const app = express();"
)

EMPTY_REVIEW_REPLY = '{"findings": [], "summary": "No major issues identified in this batch."}'


@pytest.fixture
def sample_patch():
    return SAMPLE_PATCH


@pytest.fixture
def secret_patch():
    return SECRET_PATCH


@pytest.fixture
def make_config(tmp_path):
    """Factory for validated-shape configs writing artifacts under tmp_path."""
    def _make(pr_number=None, **review_overrides):
        return AppConfig(
            model=ModelConfig(api_key="test-model-key"),
            github=GitHubConfig(
                token="test-github-token" if pr_number else None,
                repository="octo/app" if pr_number else None,
                pr_number=pr_number,
            ),
            review=ReviewConfig(root=str(tmp_path / "repo"), **review_overrides),
            output=OutputConfig(
                json_path=str(tmp_path / "out" / "full_review.json"),
                markdown_path=str(tmp_path / "out" / "full_review.md"),
                step_summary_path=str(tmp_path / "step_summary.md"),
            ),
        )
    return _make


@pytest.fixture
def model_client():
    """Model client double returning an empty, valid review by default."""
    client = Mock(spec=ModelClient)
    client.complete.return_value = EMPTY_REVIEW_REPLY
    return client


@pytest.fixture
def github_client():
    """GitHub client double for a PR with one textual patch."""
    client = Mock(spec=GitHubClient)
    client.get_pull_request_files.return_value = [
        {'filename': 'src/app.js', 'status': 'modified', 'patch': SAMPLE_PATCH},
    ]
    client.get_pull_request.return_value = {'number': 7, 'head': {'sha': 'abc123'}}
    client.create_issue_comment.return_value = {'id': 1}
    client.create_review_comment.return_value = {'id': 2}
    return client
