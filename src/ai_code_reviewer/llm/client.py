"""
Model API Client

Calls an OpenRouter-compatible chat-completions endpoint with a bounded
retry policy. Authentication failures are never retried.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests
from tenacity import Retrying, RetryCallState, retry_if_exception, stop_after_attempt, before_sleep_log

from .prompts import SYSTEM_PROMPT


logger = logging.getLogger(__name__)


class ModelAPIError(Exception):
    """Model endpoint errors (HTTP failures, network errors, bad envelopes)"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ModelAuthenticationError(ModelAPIError):
    """Model endpoint rejected the API key"""
    def __init__(self, message: str = "Model endpoint returned 401 Unauthorized"):
        super().__init__(message, status_code=401)


def is_transient(error: BaseException) -> bool:
    """Network errors, rate limits and server errors are worth retrying."""
    if not isinstance(error, ModelAPIError) or isinstance(error, ModelAuthenticationError):
        return False
    return error.status_code is None or error.status_code == 429 or error.status_code >= 500


@dataclass
class RetryPolicy:
    """Bounded retry schedule: attempt N waits backoff_seconds * N before the next try."""
    max_attempts: int = 3
    backoff_seconds: float = 1.0
    retryable: Callable[[BaseException], bool] = is_transient
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be non-negative")

    def wait_for(self, retry_state: RetryCallState) -> float:
        return self.backoff_seconds * retry_state.attempt_number

    def call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Run fn under the policy, re-raising the last error when attempts run out."""
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait_for,
            retry=retry_if_exception(self.retryable),
            sleep=self.sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(fn, *args, **kwargs)


class ModelClient:
    """
    Chat-completions client for review batches.

    Sends one system and one user message per call and returns the raw
    reply text found at choices[0].message.content.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "openrouter/auto",
        base_url: str = "https://openrouter.ai/api/v1",
        max_tokens: int = 1000,
        timeout_seconds: int = 120,
        site_url: Optional[str] = None,
        project_name: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize model client.

        Args:
            api_key: Bearer key for the endpoint
            model: Model identifier
            base_url: Endpoint base URL (without /chat/completions)
            max_tokens: Completion token cap
            timeout_seconds: Timeout applied to every request
            site_url: Optional HTTP-Referer attribution header
            project_name: Optional X-Title attribution header
            retry_policy: Retry schedule (default 3 attempts, 1s x attempt)
            session: Pre-configured requests session
        """
        if not api_key:
            raise ValueError("Model API key is required")

        self.model = model
        self.base_url = base_url.rstrip('/')
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy()
        self.session = session or requests.Session()

        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        })
        if site_url:
            self.session.headers['HTTP-Referer'] = site_url
        if project_name:
            self.session.headers['X-Title'] = project_name

    def _build_payload(self, prompt: str, system_prompt: str) -> Dict[str, Any]:
        return {
            'model': self.model,
            'temperature': 0,
            'max_tokens': self.max_tokens,
            'response_format': {'type': 'json_object'},
            'messages': [
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': prompt},
            ],
        }

    def _post_completion(self, prompt: str, system_prompt: str) -> str:
        """Single completion attempt."""
        logger.info(f"Calling model {self.model} (prompt {len(prompt)} chars)")

        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                json=self._build_payload(prompt, system_prompt),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise ModelAPIError(f"Model request failed: {e}")

        if response.status_code == 401:
            raise ModelAuthenticationError()

        if not response.ok:
            if response.status_code == 429:
                logger.warning("Model rate limit hit, consider reducing batch size")
            raise ModelAPIError(
                f"Model API error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            content = response.json()['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ModelAPIError(f"Malformed completion envelope: {e}", status_code=response.status_code)

        text = content if isinstance(content, str) else ""
        logger.debug(f"Raw model reply: {text[:200]}")
        return text

    def complete(self, prompt: str, system_prompt: str = SYSTEM_PROMPT) -> str:
        """
        Request a completion under the retry policy.

        Args:
            prompt: User message (already redacted)
            system_prompt: System instruction

        Returns:
            Reply text, possibly empty

        Raises:
            ModelAuthenticationError: On 401, without retrying
            ModelAPIError: When every attempt failed
        """
        return self.retry_policy.call(self._post_completion, prompt, system_prompt)
