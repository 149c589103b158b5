"""
Unit tests for Markdown rendering and review artifacts.
"""

import json

from ai_code_reviewer.models.finding import Finding, ReviewResult
from ai_code_reviewer.formatting.markdown import MarkdownFormatter, NO_FINDINGS_LINE
from ai_code_reviewer.formatting.artifacts import write_artifacts, append_step_summary


class TestMarkdownFormatter:
    """Unit tests for MarkdownFormatter."""

    def test_empty_report(self):
        """Test a report without findings has a single no-findings line."""
        markdown = MarkdownFormatter().render("All good.", [], "AI PR Review")

        assert markdown == f"### 🤖 AI PR Review\n**Summary:** All good.\n\n{NO_FINDINGS_LINE}"

    def test_missing_summary(self):
        """Test a default summary is used when none is given."""
        assert "**Summary:** Review completed." in MarkdownFormatter().render(None, [])

    def test_findings_table(self):
        """Test findings are rendered as table rows in order."""
        findings = [
            Finding(file="a.py", line=3, severity="high", comment="first\nline | pipe"),
            Finding(file="b.py", line=None, severity="info", comment="second"),
        ]

        markdown = MarkdownFormatter().render("s", findings)

        assert "| Severity | File | Line | Comment |\n|---|---|---|---|" in markdown
        assert "| HIGH | `a.py` | 3 | first line \\| pipe |" in markdown
        assert "| INFO | `b.py` | - | second |" in markdown
        assert markdown.index("a.py") < markdown.index("b.py")
        assert NO_FINDINGS_LINE not in markdown
        assert "Suggestion" not in markdown

    def test_suggestions_section(self):
        """Test suggestions are numbered in a section after the table."""
        findings = [
            Finding(file="a.py", line=3, severity="high", comment="c1", suggestion="use_params()"),
            Finding(file="b.py", line=9, severity="low", comment="c2"),
            Finding(file="c.py", line=1, severity="low", comment="c3", suggestion="rename()"),
        ]

        markdown = MarkdownFormatter().render("s", findings)

        assert "---\n**Suggestion 1 — a.py:3**\n```\nuse_params()\n```" in markdown
        assert "**Suggestion 2 — c.py:1**\n```\nrename()\n```" in markdown

    def test_suggestion_with_backticks_keeps_fence(self):
        """Test a suggestion containing a code fence cannot close the block early."""
        suggestion = "```python\nrun()\n```"
        findings = [
            Finding(file="a.py", line=3, severity="high", comment="c1", suggestion=suggestion),
            Finding(file="b.py", line=4, severity="low", comment="c2", suggestion="after()"),
        ]
        formatter = MarkdownFormatter()

        markdown = formatter.render("s", findings)
        inline = formatter.format_inline_comment(findings[0])

        assert f"**Suggestion 1 — a.py:3**\n````\n{suggestion}\n````" in markdown
        assert "**Suggestion 2 — b.py:4**\n```\nafter()\n```" in markdown
        assert f"**Suggestion:**\n````\n{suggestion}\n````" in inline

    def test_inline_comment(self):
        """Test inline comment bodies carry severity, suggestion and rule."""
        formatter = MarkdownFormatter()
        finding = Finding(
            file="a.js", line=2, severity="high", comment="Use of eval()", suggestion="JSON.parse(x)", rule_id="eval-call"
        )

        body = formatter.format_inline_comment(finding)

        assert body.startswith("🔴 **HIGH**: Use of eval()")
        assert "```\nJSON.parse(x)\n```" in body
        assert "`eval-call`" in body

    def test_truncation(self):
        """Test oversized comments are cut to the limit."""
        formatter = MarkdownFormatter(max_comment_length=200)
        findings = [Finding(file="a.py", line=i, severity="low", comment="x" * 50) for i in range(1, 20)]

        markdown = formatter.render("s", findings)

        assert len(markdown) == 200
        assert markdown.endswith("_... truncated_")


class TestArtifacts:
    """Unit tests for artifact writing."""

    def test_write_artifacts(self, tmp_path):
        """Test JSON and Markdown reports are written."""
        result = ReviewResult(summary="s", findings=[Finding(file="a.py", line=1, severity="low", comment="c")])
        json_path = tmp_path / "nested" / "full_review.json"
        markdown_path = tmp_path / "full_review.md"

        write_artifacts(result, "# report", json_path, markdown_path)

        assert json.loads(json_path.read_text(encoding='utf-8')) == {
            'summary': "s",
            'findings': [{'file': "a.py", 'line': 1, 'severity': "low", 'comment': "c"}],
        }
        assert markdown_path.read_text(encoding='utf-8') == "# report"

    def test_append_step_summary(self, tmp_path):
        """Test the job summary is appended, not overwritten."""
        summary_path = tmp_path / "summary.md"
        summary_path.write_text("existing\n", encoding='utf-8')

        assert append_step_summary("# report", str(summary_path))
        assert summary_path.read_text(encoding='utf-8') == "existing\n# report\n"

    def test_append_step_summary_unset(self):
        """Test nothing is written without a job summary path."""
        assert append_step_summary("# report", None) is False
