"""
Unit tests for data models.

Tests: SourceUnit, Batch, Finding, ReviewResult and model payload coercion
"""

import pytest

from ai_code_reviewer.models import (
    SourceUnit,
    Batch,
    Finding,
    ReviewResult,
    FindingPayload,
    ReviewPayload,
)


class TestSourceUnit:
    """Unit tests for SourceUnit."""

    def test_source_unit_defaults(self):
        """Test SourceUnit default body and patch."""
        unit = SourceUnit(path="src/app.py")

        assert unit.body == ""
        assert unit.patch is None
        assert unit.has_patch is False

    def test_source_unit_validation(self):
        """Test SourceUnit rejects empty paths."""
        with pytest.raises(ValueError):
            SourceUnit(path="")

        with pytest.raises(ValueError):
            SourceUnit(path="   ")

    def test_transformed_returns_new_unit(self):
        """Test transformed applies to body and patch without mutating the original."""
        unit = SourceUnit(path="a.py", body="abc", patch="+abc")

        upper = unit.transformed(str.upper)

        assert upper.body == "ABC"
        assert upper.patch == "+ABC"
        assert unit.body == "abc"
        assert unit.patch == "+abc"

    def test_transformed_keeps_missing_patch(self):
        """Test transformed leaves an absent patch absent."""
        unit = SourceUnit(path="a.py", body="abc")

        assert unit.transformed(str.upper).patch is None


class TestBatch:
    """Unit tests for Batch."""

    def test_batch_accumulates_parts(self):
        """Test Batch text and length follow appended parts."""
        batch = Batch(index=0)
        assert batch.is_empty

        batch.append("a.py", "12345")
        batch.append("b.py", "678")

        assert batch.unit_paths == ["a.py", "b.py"]
        assert batch.text == "12345678"
        assert batch.length == 8
        assert not batch.is_empty

    def test_batch_index_validation(self):
        """Test Batch rejects negative indexes."""
        with pytest.raises(ValueError):
            Batch(index=-1)


class TestFinding:
    """Unit tests for Finding."""

    def test_finding_validation(self):
        """Test Finding validation."""
        with pytest.raises(ValueError):
            Finding(file="a.py", line=1, severity="critical", comment="x")

        with pytest.raises(ValueError):
            Finding(file="a.py", line=0, severity="high", comment="x")

    def test_identity_uses_comment_prefix(self):
        """Test identity truncates the comment to 80 characters."""
        finding = Finding(file="a.py", line=3, severity="low", comment="x" * 100)

        assert finding.identity == ("a.py", 3, "low", "x" * 80)

    def test_identity_ignores_suggestion_and_rule(self):
        """Test suggestion and rule_id are not part of identity."""
        first = Finding(file="a.py", line=3, severity="low", comment="c", suggestion="s1")
        second = Finding(file="a.py", line=3, severity="low", comment="c", suggestion="s2", rule_id="r")

        assert first.identity == second.identity

    def test_is_blocking(self):
        """Test only high and medium findings are blocking."""
        assert Finding(file="a", line=None, severity="high", comment="c").is_blocking
        assert Finding(file="a", line=None, severity="medium", comment="c").is_blocking
        assert not Finding(file="a", line=None, severity="low", comment="c").is_blocking
        assert not Finding(file="a", line=None, severity="info", comment="c").is_blocking

    def test_to_dict_omits_empty_optionals(self):
        """Test to_dict includes suggestion and rule_id only when set."""
        plain = Finding(file="a.py", line=None, severity="info", comment="c").to_dict()
        full = Finding(file="a.py", line=2, severity="high", comment="c", suggestion="s", rule_id="r").to_dict()

        assert plain == {'file': 'a.py', 'line': None, 'severity': 'info', 'comment': 'c'}
        assert full['suggestion'] == "s"
        assert full['rule_id'] == "r"


class TestReviewResult:
    """Unit tests for ReviewResult."""

    def test_review_result_validation(self):
        """Test ReviewResult mode validation."""
        with pytest.raises(ValueError):
            ReviewResult(summary="s", mode="partial")

    def test_count_by_severity(self):
        """Test severity counts cover every severity."""
        result = ReviewResult(summary="s", findings=[
            Finding(file="a", line=1, severity="high", comment="1"),
            Finding(file="a", line=2, severity="high", comment="2"),
            Finding(file="a", line=3, severity="info", comment="3"),
        ])

        assert result.count_by_severity() == {'high': 2, 'medium': 0, 'low': 0, 'info': 1}
        assert result.has_high_severity

    def test_to_dict_shape(self):
        """Test artifact dictionary holds only summary and findings."""
        result = ReviewResult(summary="s", findings=[Finding(file="a", line=1, severity="low", comment="c")])

        data = result.to_dict()

        assert set(data) == {'summary', 'findings'}
        assert data['findings'][0]['file'] == "a"


class TestModelPayloads:
    """Unit tests for model payload coercion."""

    def test_finding_payload_coercion(self):
        """Test untrusted finding fields are coerced."""
        payload = FindingPayload.model_validate({
            'file': ' src/a.py ',
            'line': '12',
            'severity': 'HIGH',
            'comment': 'Issue',
            'suggestion': '   ',
            'extra': 'ignored',
        })

        finding = payload.to_finding()
        assert finding.file == "src/a.py"
        assert finding.line == 12
        assert finding.severity == "high"
        assert finding.suggestion is None

    @pytest.mark.parametrize("raw_line", [None, 0, -4, "abc", True, 2.5])
    def test_finding_payload_invalid_lines_become_none(self, raw_line):
        """Test unusable line numbers are dropped."""
        assert FindingPayload.model_validate({'line': raw_line}).line is None

    def test_finding_payload_unknown_severity(self):
        """Test unknown severities fall back to info."""
        assert FindingPayload.model_validate({'severity': 'critical'}).severity == "info"
        assert FindingPayload.model_validate({}).severity == "info"

    def test_review_payload_defaults(self):
        """Test review payload tolerates missing or wrong-typed fields."""
        payload = ReviewPayload.model_validate({'findings': "nope", 'summary': "  "})

        assert payload.findings == []
        assert payload.summary is None
