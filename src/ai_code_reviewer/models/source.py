"""
Source Data Models

리뷰 대상 소스(파일/패치)와 배치 관련 데이터 모델들
"""

from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional


@dataclass(frozen=True)
class SourceUnit:
    """리뷰 대상 단위 (파일 경로 + 본문 + 선택적 unified diff 패치)"""
    path: str
    body: str = ""
    patch: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if not self.path or not self.path.strip():
            raise ValueError("SourceUnit path cannot be empty")

    @property
    def has_patch(self) -> bool:
        """텍스트 패치 존재 여부"""
        return bool(self.patch)

    def transformed(self, transform: Callable[[str], str]) -> "SourceUnit":
        """본문과 패치에 변환을 적용한 새 SourceUnit 반환 (원본 불변)"""
        return replace(
            self,
            body=transform(self.body) if self.body else self.body,
            patch=transform(self.patch) if self.patch else self.patch,
        )


@dataclass
class Batch:
    """모델 호출 한 번에 전송되는 배치"""
    index: int
    unit_paths: List[str] = field(default_factory=list)
    parts: List[str] = field(default_factory=list)

    def __post_init__(self):
        """데이터 검증"""
        if self.index < 0:
            raise ValueError("Batch index must be non-negative")

    @property
    def text(self) -> str:
        """배치 전체 텍스트"""
        return "".join(self.parts)

    @property
    def length(self) -> int:
        """배치 전체 문자 수"""
        return sum(len(part) for part in self.parts)

    @property
    def is_empty(self) -> bool:
        """빈 배치 여부"""
        return not self.parts

    def append(self, path: str, formatted: str) -> None:
        """포맷된 단위를 배치에 추가"""
        self.unit_paths.append(path)
        self.parts.append(formatted)
