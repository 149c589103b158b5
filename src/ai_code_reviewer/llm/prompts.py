"""
Prompt Builder

Builds the strict-JSON prompts sent to the chat-completion endpoint for
each review batch.
"""

import logging
from typing import Dict, List


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are a careful, structured code reviewer that MUST return valid JSON only "
    "(one JSON object). No extra prose, no markdown, no code fences."
)

OUTPUT_FORMAT = """{
  "findings": [
    { "file": "path/relative", "line": 123, "severity": "high|medium|low|info", "comment": "what & why", "suggestion"?: "small patch/snippet" }
  ],
  "summary": "1-2 sentence summary for this batch"
}"""


class PromptBuilder:
    """
    Builds batch prompts for model review.

    The prompt pins the reply to a single JSON object with a findings list
    and a short summary so the response parser can consume it.
    """

    def __init__(self, focus_areas: List[str] = None):
        """
        Initialize prompt builder.

        Args:
            focus_areas: Review concerns listed in the prompt
        """
        self.focus_areas = focus_areas or [
            "SECURITY", "CORRECTNESS", "PERFORMANCE", "TEST COVERAGE", "MAINTAINABILITY"
        ]
        self.templates = self._load_templates()

    def _load_templates(self) -> Dict[str, str]:
        return {
            'pr': (
                "The input is a set of unified diffs. Report line numbers of the NEW "
                "version of each file, taken from the hunk headers."
            ),
            'full_repo': (
                "The input is a set of complete source files, each introduced by a "
                "'// ===== FILE: path =====' marker. Report line numbers within that file."
            ),
        }

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def build_batch_prompt(self, batch_text: str, mode: str = 'pr') -> str:
        """
        Build the user prompt for one batch.

        Args:
            batch_text: Concatenated, already redacted batch content
            mode: 'pr' or 'full_repo'

        Returns:
            Prompt text
        """
        input_note = self.templates.get(mode, self.templates['pr'])

        prompt = f"""
You are a senior code reviewer. Your response MUST be a single, valid JSON object. Do NOT include markdown, prose, code fences, or any non-JSON content. Any deviation will break the parser.

OUTPUT FORMAT (MANDATORY):
{OUTPUT_FORMAT}

If you cannot analyze the input, return:
{{"findings": [], "summary": "Unable to analyze this batch."}}

If you are unsure, return:
{{"findings": [], "summary": "No major issues identified in this batch."}}

Focus on {", ".join(self.focus_areas)}.
Be concise and actionable.
{input_note}

--- BEGIN INPUT ---
{batch_text}
--- END INPUT ---
"""
        logger.debug(f"Built {mode} prompt ({len(prompt)} chars)")
        return prompt
