"""
Review Trigger Server

Flask application exposing a health check and an endpoint that runs a
PR review on demand.
"""

import logging
from dataclasses import replace
from typing import Callable, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from . import __version__
from .config import AppConfig, ConfigurationError, load_config
from .github.client import GitHubAPIError
from .review.orchestrator import ReviewOrchestrator


logger = logging.getLogger(__name__)


OrchestratorFactory = Callable[[AppConfig], ReviewOrchestrator]


def _request_config(base: AppConfig, data: dict) -> AppConfig:
    """Derive a PR-mode configuration for one review request."""
    missing = [key for key in ('repository', 'pr_number') if not data.get(key)]
    if missing:
        raise ConfigurationError([f"Missing required field: {key}" for key in missing])

    try:
        pr_number = int(data['pr_number'])
    except (TypeError, ValueError):
        raise ConfigurationError([f"pr_number must be an integer, got {data['pr_number']!r}"])

    config = replace(
        base,
        github=replace(
            base.github,
            repository=data['repository'],
            pr_number=pr_number,
            token=data.get('github_token') or base.github.token,
        ),
    )
    config.validate()
    return config


def create_app(
    config: Optional[AppConfig] = None,
    orchestrator_factory: OrchestratorFactory = ReviewOrchestrator.from_config
) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Base configuration; loaded and validated from the environment
            when omitted
        orchestrator_factory: Builds an orchestrator from a per-request config

    Returns:
        Configured Flask app
    """
    base_config = config or load_config()

    app = Flask(__name__)
    CORS(app)  # Enable CORS for frontend

    @app.route('/api/v1/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'service': 'ai-code-reviewer',
            'version': __version__
        })

    @app.route('/api/v1/reviews', methods=['POST'])
    def review_pull_request():
        """Run a PR review and post its comments."""
        data = request.get_json(silent=True) or {}

        try:
            review_config = _request_config(base_config, data)
        except ConfigurationError as e:
            return jsonify({'error': str(e), 'status': 'invalid'}), 400

        try:
            result = orchestrator_factory(review_config).run()
        except GitHubAPIError as e:
            logger.error(f"Review failed for {data.get('repository')}#{data.get('pr_number')}: {e}")
            return jsonify({'error': str(e), 'status': 'failed'}), 502

        return jsonify({
            'status': 'aborted' if result.aborted else 'completed',
            'repository': review_config.github.repository,
            'pr_number': review_config.github.pr_number,
            'summary': result.summary,
            'total_findings': len(result.findings),
            'findings_by_severity': result.count_by_severity(),
            'batches': result.batches,
            'failed_batches': result.failed_batches,
            'inline_comments': result.inline_comments,
        })

    return app
