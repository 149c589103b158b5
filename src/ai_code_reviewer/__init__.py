"""
AI Code Reviewer

CI 환경에서 PR diff 또는 전체 저장소를 LLM으로 리뷰하는 자동 코드 리뷰 도구
"""

__version__ = "1.0.0"

from .config import AppConfig, ConfigurationError, load_config
from .review.orchestrator import ReviewOrchestrator, ReviewMode

__all__ = ["AppConfig", "ConfigurationError", "load_config", "ReviewOrchestrator", "ReviewMode"]
