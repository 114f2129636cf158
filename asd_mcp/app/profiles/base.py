from __future__ import annotations

from dataclasses import dataclass

from libs.common.errors import DomainError


class ProfileError(DomainError):
    """프로파일 문서를 해석하거나 검증하지 못했을 때 던져요. 메시지는 사용자에게 그대로 보여요."""

    def __init__(self, message: str) -> None:
        super().__init__("INVALID_PROFILE", message, retryable=False)


@dataclass(slots=True)
class ValidationOutcome:
    valid: bool
    message: str
    descriptors: int | None = None
    links: int | None = None


@dataclass(slots=True)
class RenderOutcome:
    success: bool
    document: str | None = None
    error: str | None = None


class ProfileAdapter:
    """도구가 호출하는 프로파일 처리 경계예요. 구현체는 I/O 스트림에 손대지 않아요."""

    def validate(self, content: str) -> ValidationOutcome:  # pragma: no cover - interface
        raise NotImplementedError

    def render(self, content: str, use_title: bool = False) -> RenderOutcome:  # pragma: no cover - interface
        raise NotImplementedError

    def guide(self) -> str:  # pragma: no cover - interface
        raise NotImplementedError
