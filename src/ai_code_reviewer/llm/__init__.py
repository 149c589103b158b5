"""
LLM Review Engine

This module provides the chat-completion client with retry policy,
strict-JSON batch prompts, and model response parsing.
"""

from .client import ModelClient, RetryPolicy, ModelAPIError, ModelAuthenticationError
from .prompts import PromptBuilder, SYSTEM_PROMPT
from .parser import extract_json, parse_review_response

__all__ = [
    'ModelClient',
    'RetryPolicy',
    'ModelAPIError',
    'ModelAuthenticationError',
    'PromptBuilder',
    'SYSTEM_PROMPT',
    'extract_json',
    'parse_review_response',
]
