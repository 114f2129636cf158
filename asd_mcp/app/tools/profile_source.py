"""도구 인자에서 프로파일 본문을 꺼내요. 인라인 `alps_content`가 `file_path`보다 우선해요."""

from __future__ import annotations

from pathlib import Path
from typing import Any

CONTENT_REQUIRED_MESSAGE = "alps_content or file_path parameter is required"

PROFILE_SOURCE_PROPERTIES: dict[str, Any] = {
    "alps_content": {
        "type": "string",
        "description": "ALPS profile content (XML or JSON)",
    },
    "file_path": {
        "type": "string",
        "description": "Path to an ALPS profile file; used when alps_content is not given",
    },
}


def resolve_profile_content(arguments: dict[str, Any], *, workspace_root: Path) -> tuple[str | None, str | None]:
    """`(content, error)` 튜플을 반환해요. 둘 중 정확히 하나만 값이 있어요."""
    content = arguments.get("alps_content")
    if isinstance(content, str) and content.strip():
        return content, None

    raw_path = arguments.get("file_path")
    if not isinstance(raw_path, str) or not raw_path.strip():
        return None, CONTENT_REQUIRED_MESSAGE

    target = Path(raw_path.strip())
    if not target.is_absolute():
        target = workspace_root / target

    if not target.is_file():
        return None, f"File not found: {raw_path.strip()}"
    try:
        return target.read_text(encoding="utf-8"), None
    except (OSError, UnicodeDecodeError):
        return None, f"Cannot read file: {raw_path.strip()}"
