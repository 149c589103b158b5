"""
Configuration Management

시스템 설정 관리
"""

import os
import re
import yaml
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Tuple
from pathlib import Path
import logging
from logging.handlers import RotatingFileHandler


DEFAULT_INCLUDE_EXTENSIONS = [
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".go", ".rb", ".php", ".cs", ".cpp",
    ".c", ".rs", ".kt", ".m", ".swift", ".sql", ".sh", ".yml", ".yaml", ".json",
]
DEFAULT_EXCLUDE_DIRS = [".git", "node_modules", "dist", "build", "out", ".next", ".venv", "venv", "coverage"]
DEFAULT_EXCLUDE_FILES = [".env", ".env.*", "*.pem", "*.key", "id_rsa*", "*.p12", "*.pfx", "credentials*.json"]
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigurationError(Exception):
    """설정 오류 (네트워크 호출 전 치명적 오류)"""
    def __init__(self, errors: List[str]):
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")
        self.errors = errors


def _split_list(value: str) -> List[str]:
    return [item for item in re.split(r'[,\s]+', value) if item]


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    return _split_list(value) if value else list(default)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigurationError([f"{name} must be an integer, got {value!r}"])


@dataclass
class ModelConfig:
    """모델 API 설정"""
    api_key: Optional[str] = None
    model: str = "openrouter/auto"
    base_url: str = "https://openrouter.ai/api/v1"
    allowed_models: List[str] = field(default_factory=list)
    max_tokens: int = 1000
    site_url: Optional[str] = None
    project_name: Optional[str] = None
    timeout_seconds: int = 120
    max_attempts: int = 3


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    repository: Optional[str] = None
    pr_number: Optional[int] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: int = 30

    @property
    def owner_and_repo(self) -> Tuple[str, str]:
        """'owner/repo' 분리"""
        owner, _, name = (self.repository or "").partition('/')
        return owner, name


@dataclass
class ReviewConfig:
    """리뷰 배치/필터 설정"""
    pr_max_batch_chars: int = 50000
    max_batch_chars: int = 60000
    max_file_chars: int = 20000
    max_files: int = 600
    max_inline_comments: int = 20
    include_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE_EXTENSIONS))
    exclude_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    exclude_files: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_FILES))
    root: str = "."


@dataclass
class OutputConfig:
    """리뷰 산출물 설정"""
    json_path: str = "full_review.json"
    markdown_path: str = "full_review.md"
    step_summary_path: Optional[str] = None


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    model: ModelConfig = field(default_factory=ModelConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def is_pr_mode(self) -> bool:
        """PR 번호 존재 여부로 실행 모드 결정"""
        return self.github.pr_number is not None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        pr_number = os.getenv("PR_NUMBER", "").strip()
        if pr_number and not pr_number.isdigit():
            raise ConfigurationError([f"PR_NUMBER must be a positive integer, got {pr_number!r}"])

        return cls(
            model=ModelConfig(
                api_key=os.getenv("OPENROUTER_API_KEY") or None,
                model=os.getenv("OPENROUTER_MODEL") or "openrouter/auto",
                base_url=os.getenv("OPENROUTER_BASE_URL") or "https://openrouter.ai/api/v1",
                allowed_models=_env_list("OPENROUTER_ALLOWED_MODELS", []),
                max_tokens=_env_int("MODEL_MAX_TOKENS", 1000),
                site_url=os.getenv("OR_SITE_URL") or None,
                project_name=os.getenv("OR_PROJECT_NAME") or None,
                timeout_seconds=_env_int("MODEL_TIMEOUT", 120),
                max_attempts=_env_int("MODEL_MAX_ATTEMPTS", 3),
            ),
            github=GitHubConfig(
                token=os.getenv("GITHUB_TOKEN") or None,
                repository=os.getenv("REPO") or os.getenv("GITHUB_REPOSITORY") or None,
                pr_number=int(pr_number) if pr_number else None,
                api_base_url=os.getenv("GITHUB_API_URL") or "https://api.github.com",
                timeout_seconds=_env_int("GITHUB_TIMEOUT", 30),
            ),
            review=ReviewConfig(
                pr_max_batch_chars=_env_int("PR_MAX_BATCH_CHARS", 50000),
                max_batch_chars=_env_int("MAX_BATCH_CHARS", 60000),
                max_file_chars=_env_int("MAX_FILE_CHARS", 20000),
                max_files=_env_int("MAX_FILES", 600),
                max_inline_comments=_env_int("MAX_INLINE_COMMENTS", 20),
                include_extensions=_env_list("INCLUDE_EXTS", DEFAULT_INCLUDE_EXTENSIONS),
                exclude_dirs=_env_list("EXCLUDE_DIRS", DEFAULT_EXCLUDE_DIRS),
                exclude_files=_env_list("EXCLUDE_FILES", DEFAULT_EXCLUDE_FILES),
                root=os.getenv("REVIEW_ROOT") or ".",
            ),
            output=OutputConfig(
                json_path=os.getenv("OUTPUT_JSON") or "full_review.json",
                markdown_path=os.getenv("OUTPUT_MARKDOWN") or "full_review.md",
                step_summary_path=os.getenv("GITHUB_STEP_SUMMARY") or None,
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
                file_path=os.getenv("LOG_FILE") or None,
                max_file_size=_env_int("LOG_MAX_SIZE", 10 * 1024 * 1024),
                backup_count=_env_int("LOG_BACKUP_COUNT", 5),
            ),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        try:
            return cls(
                model=ModelConfig(**config_data.get('model', {})),
                github=GitHubConfig(**config_data.get('github', {})),
                review=ReviewConfig(**config_data.get('review', {})),
                output=OutputConfig(**config_data.get('output', {})),
                logging=LoggingConfig(**config_data.get('logging', {})),
            )
        except TypeError as e:
            raise ConfigurationError([f"Unknown configuration key in {config_path}: {e}"])

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # 모델 API 키 필수 확인
        if not self.model.api_key:
            errors.append("OPENROUTER_API_KEY is required")

        if self.model.allowed_models and self.model.model not in self.model.allowed_models:
            errors.append(f"Model '{self.model.model}' is not in the allowed model list")

        # PR 모드에서는 GitHub 토큰과 저장소 좌표 필수
        if self.is_pr_mode:
            if not self.github.token:
                errors.append("GITHUB_TOKEN is required in PR mode")
            owner, name = self.github.owner_and_repo
            if not owner or not name:
                errors.append("Repository must be given as 'owner/repo' in PR mode")
            if self.github.pr_number is not None and self.github.pr_number < 1:
                errors.append("PR number must be positive")

        # 수치 설정 검증
        positive_fields = {
            'model.max_tokens': self.model.max_tokens,
            'model.timeout_seconds': self.model.timeout_seconds,
            'model.max_attempts': self.model.max_attempts,
            'github.timeout_seconds': self.github.timeout_seconds,
            'review.pr_max_batch_chars': self.review.pr_max_batch_chars,
            'review.max_batch_chars': self.review.max_batch_chars,
            'review.max_file_chars': self.review.max_file_chars,
            'review.max_files': self.review.max_files,
        }
        for name, value in positive_fields.items():
            if not isinstance(value, int) or value <= 0:
                errors.append(f"{name} must be a positive integer")

        if not isinstance(self.review.max_inline_comments, int) or self.review.max_inline_comments < 0:
            errors.append("review.max_inline_comments must be a non-negative integer")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if str(self.logging.level).upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigurationError(errors)

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        data = asdict(self)
        # 보안상 키와 토큰은 제외
        data['model'].pop('api_key', None)
        data['github'].pop('token', None)
        return data


def setup_logging(logging_config: LoggingConfig) -> None:
    """로깅 설정"""
    logging.basicConfig(
        level=getattr(logging, logging_config.level.upper()),
        format=logging_config.format,
    )

    # 파일 로깅이 설정된 경우 로테이션 설정
    if logging_config.file_path:
        handler = RotatingFileHandler(
            logging_config.file_path,
            maxBytes=logging_config.max_file_size,
            backupCount=logging_config.backup_count,
        )
        handler.setFormatter(logging.Formatter(logging_config.format))

        # 루트 로거에 핸들러 추가
        root_logger = logging.getLogger()
        root_logger.addHandler(handler)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """설정 로드 및 검증 (YAML 경로가 없으면 환경 변수 사용)"""
    config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()
    config.validate()
    return config
