"""
Command Line Entry Point

`ai-code-review` runs one review in CI. With a PR number it reviews the
pull request diff and posts comments; without one it reviews the whole
repository and writes report artifacts.

Exit codes: 0 success, 1 review failure (authentication or GitHub API),
2 configuration error.
"""

import logging
from dataclasses import replace
from typing import Optional

import click

from . import __version__
from .config import AppConfig, ConfigurationError, setup_logging
from .github.client import GitHubAPIError
from .review.orchestrator import ReviewOrchestrator


logger = logging.getLogger(__name__)


EXIT_OK = 0
EXIT_REVIEW_FAILED = 1
EXIT_CONFIG_ERROR = 2


def _apply_overrides(
    config: AppConfig,
    pr_number: Optional[int],
    repository: Optional[str],
    root: Optional[str],
    log_level: Optional[str]
) -> AppConfig:
    if pr_number is not None or repository:
        config = replace(config, github=replace(
            config.github,
            pr_number=pr_number if pr_number is not None else config.github.pr_number,
            repository=repository or config.github.repository,
        ))
    if root:
        config = replace(config, review=replace(config.review, root=root))
    if log_level:
        config = replace(config, logging=replace(config.logging, level=log_level))
    return config


@click.command()
@click.version_option(version=__version__, prog_name="ai-code-review")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file (defaults to environment variables).",
)
@click.option("--pr-number", type=int, default=None, help="Pull request to review (enables PR mode).")
@click.option("--repository", default=None, help="Repository as owner/repo.")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Repository root for full-repository review.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level.",
)
def main(
    config_path: Optional[str],
    pr_number: Optional[int],
    repository: Optional[str],
    root: Optional[str],
    log_level: Optional[str],
) -> None:
    """Review a pull request or a full repository with an LLM.

    Examples:
        ai-code-review --pr-number 42 --repository octo/app
        ai-code-review --root . --log-level DEBUG
    """
    try:
        config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()
        config = _apply_overrides(config, pr_number, repository, root, log_level)
        config.validate()
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        raise SystemExit(EXIT_CONFIG_ERROR)

    setup_logging(config.logging)

    try:
        result = ReviewOrchestrator.from_config(config).run()
    except GitHubAPIError as e:
        logger.error(f"GitHub API failure: {e}")
        click.echo(f"❌ GitHub API failure: {e}", err=True)
        raise SystemExit(EXIT_REVIEW_FAILED)

    if result.aborted:
        click.echo("❌ Model endpoint rejected the API key. Check OPENROUTER_API_KEY.", err=True)
        raise SystemExit(EXIT_REVIEW_FAILED)

    click.echo(
        f"✅ Review complete ({result.mode}). Batches: {result.batches}, "
        f"Findings: {len(result.findings)}, Inline comments: {result.inline_comments}"
    )


if __name__ == '__main__':
    main()
