"""
Unit tests for the static rule scanner.
"""

import re
import pytest

from ai_code_reviewer.review.scanner import StaticRule, StaticRuleScanner, DEFAULT_RULES


def patch_adding(*lines):
    body = "\n".join(f"+{line}" for line in lines)
    return f"@@ -1,1 +1,{len(lines) + 1} @@\n context\n{body}"


class TestStaticRuleScanner:
    """Unit tests for StaticRuleScanner."""

    def test_added_eval_is_high(self):
        """Test an added eval( produces a high finding at its new line."""
        findings = StaticRuleScanner().scan("app.js", patch_adding("eval(code);"))

        assert len(findings) == 1
        assert findings[0].severity == "high"
        assert findings[0].file == "app.js"
        assert findings[0].line == 2
        assert findings[0].rule_id == "eval-call"

    def test_removed_eval_ignored(self):
        """Test removed lines are never evaluated."""
        patch = "@@ -1,2 +1,1 @@\n context\n-eval(code);"

        assert StaticRuleScanner().scan("app.js", patch) == []

    def test_context_eval_ignored(self):
        """Test context lines are never evaluated."""
        patch = "@@ -1,2 +1,2 @@\n eval(code);\n+const x = 1;"

        assert StaticRuleScanner().scan("app.js", patch) == []

    @pytest.mark.parametrize("line, rule_id", [
        ("const fn = new Function('a', body);", "function-constructor"),
        ("exec('ping -c 1 ' + host, cb);", "exec-concatenation"),
        ('const sql = "SELECT * FROM users WHERE id = " + id;', "sql-concatenation"),
        ("const PASSWORD = 'super-secret-123';", "hardcoded-secret"),
        ("crypto.createHash('md5').update(s)", "weak-hash"),
        ("requests.get(url, verify=False)", "tls-verification-disabled"),
        ("el.innerHTML = userInput;", "inner-html"),
        ("obj = pickle.loads(blob)", "unsafe-deserialization"),
        ("data = yaml.load(stream)", "unsafe-deserialization"),
        ("  debugger;", "debugger-statement"),
    ])
    def test_default_rules(self, line, rule_id):
        """Test each default rule fires on a representative added line."""
        findings = StaticRuleScanner().scan("src/x", patch_adding(line))

        assert rule_id in {finding.rule_id for finding in findings}

    @pytest.mark.parametrize("line", [
        "data = yaml.load(stream, Loader=yaml.SafeLoader)",
        "if (el.innerHTML == other) {}",
        "const total = price + tax;",
    ])
    def test_safe_lines(self, line):
        """Test safe code does not trigger rules."""
        assert StaticRuleScanner().scan("src/x", patch_adding(line)) == []

    def test_one_line_multiple_rules(self):
        """Test one added line can trigger several rules."""
        rules = [
            StaticRule('a', re.compile('foo'), 'low', 'a'),
            StaticRule('b', re.compile('bar'), 'info', 'b'),
        ]

        findings = StaticRuleScanner(rules).scan("x.py", patch_adding("foo(bar)"))

        assert [finding.rule_id for finding in findings] == ['a', 'b']
        assert all(finding.line == 2 for finding in findings)

    def test_empty_patch(self):
        """Test missing patches yield nothing."""
        assert StaticRuleScanner().scan("x.py", None) == []
        assert StaticRuleScanner().scan("x.py", "") == []

    def test_rule_ids_unique(self):
        """Test default rule ids are unique."""
        ids = [rule.rule_id for rule in DEFAULT_RULES]

        assert len(ids) == len(set(ids))
