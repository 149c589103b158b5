"""
Secret Redactor

Scrubs secret-shaped substrings from source text before it is sent to the
model endpoint. Rules are applied in order and every match is replaced with
a fixed placeholder.
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Union


logger = logging.getLogger(__name__)


PLACEHOLDER = "[REDACTED]"


@dataclass(frozen=True)
class RedactionRule:
    """A named substitution applied to outgoing text."""
    name: str
    pattern: Pattern[str]
    replacement: str = PLACEHOLDER


DEFAULT_RULES: List[RedactionRule] = [
    RedactionRule(
        'private_key_block',
        re.compile(
            r'-----BEGIN [A-Z0-9 ]*PRIVATE KEY-----.*?-----END [A-Z0-9 ]*PRIVATE KEY-----',
            re.S,
        ),
    ),
    RedactionRule('google_api_key', re.compile(r'AIza[0-9A-Za-z_\-]{35}')),
    RedactionRule('github_token', re.compile(r'gh[pousr]_[A-Za-z0-9_]{36,}')),
    RedactionRule('github_pat', re.compile(r'github_pat_[A-Za-z0-9_]{22,}')),
    RedactionRule('aws_access_key', re.compile(r'(?:AKIA|ASIA)[0-9A-Z]{16}')),
    RedactionRule('secret_key', re.compile(r'sk-[A-Za-z0-9_\-]{20,}')),
    # Keeps the name and separator, replaces only the value. The name must
    # start a token and is length-bounded so long runs match in linear time.
    # Must stay after the token rules for redaction to be idempotent.
    RedactionRule(
        'assignment',
        re.compile(
            r'((?<![A-Za-z0-9_\-])[A-Za-z0-9_\-]{0,40}?'
            r'(?:api_key|key|secret|token|password|passwd|authorization)'
            r'[A-Za-z0-9_\-]{0,40}["\']?\s{0,10}[:=]\s{0,10}["\']?)'
            r'[A-Za-z0-9_\-]{12,}',
            re.I,
        ),
        r'\1' + PLACEHOLDER,
    ),
]


class Redactor:
    """
    Applies an ordered list of redaction rules to text.

    The placeholder itself never matches any default rule, so redacting
    already-redacted text is a no-op.
    """

    def __init__(self, rules: Optional[Sequence[RedactionRule]] = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def redact(self, text: Union[str, bytes, None]) -> str:
        """
        Replace secret-shaped substrings with the placeholder.

        Args:
            text: Text to scrub; None yields an empty string and bytes are
                decoded as UTF-8 with replacement characters

        Returns:
            Redacted text
        """
        if text is None:
            return ""
        if isinstance(text, bytes):
            text = text.decode('utf-8', errors='replace')
        elif not isinstance(text, str):
            text = str(text)

        for rule in self.rules:
            text, count = rule.pattern.subn(rule.replacement, text)
            if count:
                logger.debug(f"Redacted {count} match(es) for rule '{rule.name}'")

        return text


_default_redactor = Redactor()


def redact(text: Union[str, bytes, None]) -> str:
    """Redact text with the default rule set."""
    return _default_redactor.redact(text)
