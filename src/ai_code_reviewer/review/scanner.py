"""
Static Rule Scanner

Runs data-driven regex rules over the lines a patch adds. Findings share
the shape of model findings so both can be merged into one report.
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence

from ..models.finding import Finding
from ..github.parser import iter_diff_lines


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaticRule:
    """A single pattern rule evaluated against added lines."""
    rule_id: str
    pattern: Pattern[str]
    severity: str
    message: str


DEFAULT_RULES: List[StaticRule] = [
    StaticRule(
        'eval-call',
        re.compile(r'\beval\s*\('),
        'high',
        "Use of eval() allows arbitrary code execution; parse or dispatch the input explicitly instead.",
    ),
    StaticRule(
        'function-constructor',
        re.compile(r'\bnew\s+Function\s*\('),
        'high',
        "new Function() compiles strings into code; avoid building functions from runtime data.",
    ),
    StaticRule(
        'exec-concatenation',
        re.compile(r'\bexec(?:Sync)?\s*\(\s*[\'"`][^\'"`]*[\'"`]\s*\+'),
        'high',
        "Shell command built by string concatenation is open to command injection; pass arguments as a list.",
    ),
    StaticRule(
        'sql-concatenation',
        re.compile(
            r'[\'"`]\s*(?:SELECT|INSERT|UPDATE|DELETE)\b[^\'"`]*[\'"`]\s*\+',
            re.I,
        ),
        'high',
        "SQL query built by string concatenation is open to SQL injection; use parameterized queries.",
    ),
    StaticRule(
        'hardcoded-secret',
        re.compile(
            r'(?:password|passwd|secret|api[_-]?key|access[_-]?token|auth[_-]?token)\w*[\'"]?\s*[:=]\s*[\'"][^\'"\s]{6,}[\'"]',
            re.I,
        ),
        'high',
        "Hardcoded credential; load secrets from the environment or a secret manager.",
    ),
    StaticRule(
        'weak-hash',
        re.compile(r'''(?:createHash\s*\(\s*['"](?:md5|sha1)['"]|hashlib\.(?:md5|sha1)\s*\()''', re.I),
        'medium',
        "MD5/SHA1 are not collision resistant; use SHA-256 or a password hashing function.",
    ),
    StaticRule(
        'tls-verification-disabled',
        re.compile(r'verify\s*=\s*False|rejectUnauthorized\s*:\s*false'),
        'medium',
        "TLS certificate verification is disabled.",
    ),
    StaticRule(
        'inner-html',
        re.compile(r'\.innerHTML\s*=(?!=)'),
        'medium',
        "Assigning to innerHTML with dynamic content enables XSS; use textContent or sanitize the markup.",
    ),
    StaticRule(
        'unsafe-deserialization',
        re.compile(r'\bpickle\.loads?\s*\(|\byaml\.load\s*\((?![^)]*SafeLoader)'),
        'medium',
        "Deserializing untrusted data can execute code; use a safe loader or a data-only format.",
    ),
    StaticRule(
        'debugger-statement',
        re.compile(r'^\s*debugger\s*;'),
        'low',
        "Leftover debugger statement.",
    ),
]


class StaticRuleScanner:
    """
    Evaluates static rules against the added lines of unified-diff patches.

    Removed and context lines are never evaluated. One added line may
    trigger several rules.
    """

    def __init__(self, rules: Optional[Sequence[StaticRule]] = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def scan(self, filename: str, patch: Optional[str]) -> List[Finding]:
        """
        Scan one file's patch.

        Args:
            filename: Repository-relative file path
            patch: Unified diff text for the file

        Returns:
            Findings in line order, rules in declaration order per line
        """
        if not patch:
            return []

        findings: List[Finding] = []
        for diff_line in iter_diff_lines(patch):
            if diff_line.kind != 'added':
                continue
            for rule in self.rules:
                if rule.pattern.search(diff_line.content):
                    findings.append(Finding(
                        file=filename,
                        line=diff_line.new_line,
                        severity=rule.severity,
                        comment=rule.message,
                        rule_id=rule.rule_id,
                    ))

        if findings:
            logger.info(f"Static rules flagged {len(findings)} issue(s) in {filename}")
        return findings
