"""
Review Finding Models

리뷰 결과(Finding, ReviewResult) 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


SEVERITIES = ('high', 'medium', 'low', 'info')

# 중복 판정 시 비교하는 comment 접두사 길이
COMMENT_KEY_PREFIX = 80


@dataclass(frozen=True)
class Finding:
    """개별 리뷰 지적 사항"""
    file: str
    line: Optional[int]
    severity: str
    comment: str
    suggestion: Optional[str] = None
    rule_id: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if self.severity not in SEVERITIES:
            raise ValueError(f"Invalid severity: {self.severity}")
        if self.line is not None and self.line < 1:
            raise ValueError("Line number must be positive")

    @property
    def identity(self) -> Tuple[str, Optional[int], str, str]:
        """중복 제거용 식별 키"""
        return (self.file, self.line, self.severity, self.comment[:COMMENT_KEY_PREFIX])

    @property
    def is_blocking(self) -> bool:
        """인라인 코멘트 대상(high/medium) 여부"""
        return self.severity in ('high', 'medium')

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화용 딕셔너리 반환"""
        data: Dict[str, Any] = {
            'file': self.file,
            'line': self.line,
            'severity': self.severity,
            'comment': self.comment,
        }
        if self.suggestion:
            data['suggestion'] = self.suggestion
        if self.rule_id:
            data['rule_id'] = self.rule_id
        return data


@dataclass
class ReviewResult:
    """한 번의 리뷰 실행 결과"""
    summary: str
    findings: List[Finding] = field(default_factory=list)
    mode: str = 'full_repo'
    batches: int = 0
    failed_batches: int = 0
    files_reviewed: int = 0
    inline_comments: int = 0
    aborted: bool = False

    def __post_init__(self):
        """데이터 검증"""
        if self.mode not in {'pr', 'full_repo'}:
            raise ValueError(f"Invalid mode: {self.mode}")
        if self.batches < 0 or self.failed_batches < 0:
            raise ValueError("Batch counts must be non-negative")

    def count_by_severity(self) -> Dict[str, int]:
        """심각도별 지적 수"""
        counts = {severity: 0 for severity in SEVERITIES}
        for finding in self.findings:
            counts[finding.severity] += 1
        return counts

    @property
    def has_high_severity(self) -> bool:
        """high 심각도 지적 존재 여부"""
        return any(f.severity == 'high' for f in self.findings)

    def to_dict(self) -> Dict[str, Any]:
        """아티팩트용 딕셔너리 ({summary, findings})"""
        return {
            'summary': self.summary,
            'findings': [f.to_dict() for f in self.findings],
        }


# Pydantic models for validating untrusted model output
class FindingPayload(BaseModel):
    """모델 응답의 finding 항목 검증용 모델"""
    model_config = ConfigDict(extra='ignore')

    file: str = ''
    line: Optional[int] = None
    severity: str = 'info'
    comment: str = ''
    suggestion: Optional[str] = None

    @field_validator('file', 'comment', mode='before')
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return ''
        return v.strip() if isinstance(v, str) else str(v)

    @field_validator('line', mode='before')
    @classmethod
    def coerce_line(cls, v):
        if isinstance(v, bool) or v is None:
            return None
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if isinstance(v, str) and v.strip().isdigit():
            v = int(v.strip())
        if isinstance(v, int) and v >= 1:
            return v
        return None

    @field_validator('severity', mode='before')
    @classmethod
    def coerce_severity(cls, v):
        value = str(v or '').strip().lower()
        return value if value in SEVERITIES else 'info'

    @field_validator('suggestion', mode='before')
    @classmethod
    def coerce_suggestion(cls, v):
        if v is None:
            return None
        text = v if isinstance(v, str) else str(v)
        return text if text.strip() else None

    def to_finding(self) -> Finding:
        """내부 Finding 타입으로 변환"""
        return Finding(
            file=self.file,
            line=self.line,
            severity=self.severity,
            comment=self.comment,
            suggestion=self.suggestion,
        )


class ReviewPayload(BaseModel):
    """모델 응답 전체({findings, summary}) 검증용 모델"""
    model_config = ConfigDict(extra='ignore')

    findings: List[Any] = []
    summary: Optional[str] = None

    @field_validator('findings', mode='before')
    @classmethod
    def coerce_findings(cls, v):
        return v if isinstance(v, list) else []

    @field_validator('summary', mode='before')
    @classmethod
    def coerce_summary(cls, v):
        if v is None:
            return None
        text = v.strip() if isinstance(v, str) else str(v)
        return text or None
