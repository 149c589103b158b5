"""
Review Orchestrator

Runs one review end to end, either over a pull request diff or over a
full repository snapshot. Units are redacted before batching; static
rules and diff positions always use the raw patches.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..config import AppConfig
from ..models.finding import Finding, ReviewResult
from ..models.source import Batch, SourceUnit
from ..github.client import GitHubClient, GitHubAPIError
from ..github.parser import PRDiffParser, position_of
from ..llm.client import ModelClient, RetryPolicy, ModelAPIError, ModelAuthenticationError
from ..llm.parser import parse_review_response
from ..llm.prompts import PromptBuilder
from ..formatting.markdown import MarkdownFormatter
from ..formatting.artifacts import write_artifacts, append_step_summary
from .redactor import Redactor
from .chunker import chunk, format_diff_unit, FileUnitFormatter
from .scanner import StaticRuleScanner
from .merger import merge_findings
from .walker import PathFilter, RepositoryWalker


logger = logging.getLogger(__name__)


EMPTY_DIFF_COMMENT = "No textual diff to review (binary or empty changes)."
EMPTY_REPO_SUMMARY = "No source files matched the configured filters."
AUTH_FAILURE_COMMENT = "❌ Model endpoint returned 401 Unauthorized. Check the OPENROUTER_API_KEY secret."
INVALID_JSON_SUMMARY = "Model did not return valid JSON for this batch."
FAILED_BATCH_SUMMARY = "Batch {index} could not be reviewed (model call failed)."

PR_REPORT_TITLE = "AI PR Review"
FULL_REPO_REPORT_TITLE = "AI Full Repository Review"


class ReviewMode(Enum):
    """Review run mode, chosen once by the presence of a PR number."""
    PR = "pr"
    FULL_REPO = "full_repo"


@dataclass
class BatchReviewOutcome:
    """Accumulated model output over all batches of a run."""
    findings: List[Finding] = field(default_factory=list)
    summaries: List[str] = field(default_factory=list)
    failed_batches: int = 0
    aborted: bool = False


class ReviewOrchestrator:
    """
    Drives the review pipeline for both modes.

    PR mode: fetch diff, build batches and scan raw patches, review each
    batch, merge, post one summary comment, then place capped inline
    comments. Full-repo mode: walk the tree, build batches, review each
    batch, merge, write artifacts.
    """

    def __init__(
        self,
        config: AppConfig,
        model_client: ModelClient,
        github_client: Optional[GitHubClient] = None,
        redactor: Optional[Redactor] = None,
        scanner: Optional[StaticRuleScanner] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        formatter: Optional[MarkdownFormatter] = None
    ):
        """
        Initialize review orchestrator.

        Args:
            config: Validated application configuration
            model_client: Chat-completion client
            github_client: GitHub client, required in PR mode
            redactor: Secret redactor applied to every unit before batching
            scanner: Static rule scanner for PR patches
            prompt_builder: Batch prompt builder
            formatter: Markdown report formatter
        """
        self.config = config
        self.model_client = model_client
        self.github_client = github_client
        self.redactor = redactor or Redactor()
        self.scanner = scanner or StaticRuleScanner()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.formatter = formatter or MarkdownFormatter()
        self.diff_parser = PRDiffParser()

    @classmethod
    def from_config(cls, config: AppConfig) -> "ReviewOrchestrator":
        """Build an orchestrator with HTTP clients wired from configuration."""
        model_client = ModelClient(
            api_key=config.model.api_key,
            model=config.model.model,
            base_url=config.model.base_url,
            max_tokens=config.model.max_tokens,
            timeout_seconds=config.model.timeout_seconds,
            site_url=config.model.site_url,
            project_name=config.model.project_name,
            retry_policy=RetryPolicy(max_attempts=config.model.max_attempts),
        )
        github_client = None
        if config.is_pr_mode:
            github_client = GitHubClient(
                token=config.github.token,
                base_url=config.github.api_base_url,
                timeout_seconds=config.github.timeout_seconds,
            )
        return cls(config, model_client, github_client)

    @property
    def mode(self) -> ReviewMode:
        return ReviewMode.PR if self.config.is_pr_mode else ReviewMode.FULL_REPO

    def run(self) -> ReviewResult:
        """Run the review in the configured mode."""
        if self.mode is ReviewMode.PR:
            owner, repo = self.config.github.owner_and_repo
            return self.run_pr(owner, repo, self.config.github.pr_number)
        return self.run_full_repo(self.config.review.root)

    def review_batches(self, batches: List[Batch], mode: ReviewMode) -> BatchReviewOutcome:
        """
        Send batches to the model sequentially and accumulate their output.

        A 401 aborts the remaining batches. Any other model failure or an
        unusable reply only costs that batch its findings.
        """
        outcome = BatchReviewOutcome()

        for batch in batches:
            number = batch.index + 1
            logger.info(f"Reviewing batch {number}/{len(batches)} ({batch.length} chars, {len(batch.unit_paths)} unit(s))")
            prompt = self.prompt_builder.build_batch_prompt(batch.text, mode.value)

            try:
                reply = self.model_client.complete(prompt, self.prompt_builder.system_prompt)
            except ModelAuthenticationError as e:
                logger.error(f"Model authentication failed on batch {number}: {e}")
                outcome.aborted = True
                break
            except ModelAPIError as e:
                logger.error(f"Model call failed on batch {number}: {e}")
                outcome.failed_batches += 1
                outcome.summaries.append(FAILED_BATCH_SUMMARY.format(index=number))
                continue

            findings, summary, ok = parse_review_response(reply)
            if not ok:
                logger.warning(f"Batch {number} reply was not valid JSON")
                outcome.failed_batches += 1
                summary = INVALID_JSON_SUMMARY

            outcome.findings.extend(findings)
            if summary:
                outcome.summaries.append(summary)

        return outcome

    @staticmethod
    def final_summary(batch_count: int, summaries: List[str]) -> str:
        if summaries:
            return f"Batches: {batch_count}. {' '.join(summaries[:3])}"
        return f"Reviewed {batch_count} batch(es)."

    def _redact_units(self, units: List[SourceUnit]) -> List[SourceUnit]:
        return [unit.transformed(self.redactor.redact) for unit in units]

    def run_pr(self, owner: str, repo: str, pr_number: int) -> ReviewResult:
        """
        Review a pull request and post the results.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            ReviewResult of the run

        Raises:
            GitHubAPIError: When the PR files cannot be fetched or the
                summary comment cannot be posted
        """
        if self.github_client is None:
            raise ValueError("GitHub client is required in PR mode")

        logger.info(f"Running PR review for {owner}/{repo}#{pr_number}")

        files = self.github_client.get_pull_request_files(owner, repo, pr_number)
        units = self.diff_parser.parse_files(files)
        raw_patches: Dict[str, str] = {unit.path: unit.patch for unit in units if unit.has_patch}

        static_findings: List[Finding] = []
        for path, patch in raw_patches.items():
            static_findings.extend(self.scanner.scan(path, patch))

        batches = chunk(self._redact_units(units), self.config.review.pr_max_batch_chars, format_diff_unit)

        if not batches:
            self.github_client.create_issue_comment(owner, repo, pr_number, EMPTY_DIFF_COMMENT)
            return ReviewResult(summary=EMPTY_DIFF_COMMENT, mode=ReviewMode.PR.value, files_reviewed=len(units))

        outcome = self.review_batches(batches, ReviewMode.PR)

        if outcome.aborted:
            self.github_client.create_issue_comment(owner, repo, pr_number, AUTH_FAILURE_COMMENT)
            return ReviewResult(
                summary=AUTH_FAILURE_COMMENT,
                findings=merge_findings(static_findings, outcome.findings),
                mode=ReviewMode.PR.value,
                batches=len(batches),
                failed_batches=outcome.failed_batches,
                files_reviewed=len(raw_patches),
                aborted=True,
            )

        merged = merge_findings(static_findings, outcome.findings)
        summary = self.final_summary(len(batches), outcome.summaries)
        markdown = self.formatter.render(summary, merged, PR_REPORT_TITLE)

        self.github_client.create_issue_comment(owner, repo, pr_number, markdown)
        placed = self._place_inline_comments(owner, repo, pr_number, merged, raw_patches)
        append_step_summary(markdown, self.config.output.step_summary_path)

        logger.info(f"PR review posted. Findings: {len(merged)}, inline comments: {placed}")
        return ReviewResult(
            summary=summary,
            findings=merged,
            mode=ReviewMode.PR.value,
            batches=len(batches),
            failed_batches=outcome.failed_batches,
            files_reviewed=len(raw_patches),
            inline_comments=placed,
        )

    def _inline_targets(self, findings: List[Finding], raw_patches: Dict[str, str]) -> List[Tuple[Finding, int]]:
        """Blocking findings that map onto a diff position, in merged order, capped."""
        targets: List[Tuple[Finding, int]] = []
        limit = self.config.review.max_inline_comments

        for finding in findings:
            if len(targets) >= limit:
                break
            if not finding.is_blocking or finding.line is None:
                continue
            patch = raw_patches.get(finding.file)
            position = position_of(patch, finding.line) if patch else None
            if position is None:
                logger.debug(f"No diff position for {finding.file}:{finding.line}, summary only")
                continue
            targets.append((finding, position))

        return targets

    def _place_inline_comments(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        findings: List[Finding],
        raw_patches: Dict[str, str]
    ) -> int:
        targets = self._inline_targets(findings, raw_patches)
        if not targets:
            return 0

        try:
            pull_request = self.github_client.get_pull_request(owner, repo, pr_number)
        except GitHubAPIError as e:
            logger.warning(f"Could not fetch PR metadata, skipping inline comments: {e}")
            return 0

        commit_id = (pull_request.get('head') or {}).get('sha')
        if not commit_id:
            logger.warning("PR head commit SHA unavailable, skipping inline comments")
            return 0

        placed = 0
        for finding, position in targets:
            try:
                self.github_client.create_review_comment(
                    owner, repo, pr_number,
                    commit_id=commit_id,
                    path=finding.file,
                    position=position,
                    body=self.formatter.format_inline_comment(finding),
                )
                placed += 1
            except GitHubAPIError as e:
                logger.warning(f"Failed to post inline comment on {finding.file}:{finding.line}: {e}")

        return placed

    def run_full_repo(self, root: Optional[str] = None) -> ReviewResult:
        """
        Review every eligible file under root and write the artifacts.

        Args:
            root: Repository root (defaults to the configured root)

        Returns:
            ReviewResult of the run
        """
        review_config = self.config.review
        walker = RepositoryWalker(
            root or review_config.root,
            PathFilter(review_config.include_extensions, review_config.exclude_dirs, review_config.exclude_files),
            max_files=review_config.max_files,
            max_file_chars=review_config.max_file_chars,
        )
        units = walker.collect()
        batches = chunk(
            self._redact_units(units),
            review_config.max_batch_chars,
            FileUnitFormatter(review_config.max_file_chars),
        )

        if not batches:
            result = ReviewResult(summary=EMPTY_REPO_SUMMARY, mode=ReviewMode.FULL_REPO.value, files_reviewed=len(units))
        else:
            outcome = self.review_batches(batches, ReviewMode.FULL_REPO)
            summary = AUTH_FAILURE_COMMENT if outcome.aborted else self.final_summary(len(batches), outcome.summaries)
            result = ReviewResult(
                summary=summary,
                findings=merge_findings(outcome.findings),
                mode=ReviewMode.FULL_REPO.value,
                batches=len(batches),
                failed_batches=outcome.failed_batches,
                files_reviewed=len(units),
                aborted=outcome.aborted,
            )

        markdown = self.formatter.render(result.summary, result.findings, FULL_REPO_REPORT_TITLE)
        write_artifacts(result, markdown, self.config.output.json_path, self.config.output.markdown_path)
        append_step_summary(markdown, self.config.output.step_summary_path)

        logger.info(
            f"Full repo review complete. Files: {result.files_reviewed}, "
            f"Batches: {result.batches}, Findings: {len(result.findings)}"
        )
        return result
