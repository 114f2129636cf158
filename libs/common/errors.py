from __future__ import annotations


class DomainError(Exception):
    def __init__(self, error_code: str, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.retryable = retryable


class TransportError(DomainError):
    """입출력 스트림을 더 이상 쓸 수 없을 때 던져요. 서버 루프는 여기서 끝나요."""

    def __init__(self, message: str = "Transport failure.") -> None:
        super().__init__("TRANSPORT_FAILED", message, retryable=False)
