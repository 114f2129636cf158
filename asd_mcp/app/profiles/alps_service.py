from __future__ import annotations

from asd_mcp.app.profiles.alps_profile import load_profile
from asd_mcp.app.profiles.base import ProfileAdapter, ProfileError, RenderOutcome, ValidationOutcome
from asd_mcp.app.profiles.diagram import render_dot
from asd_mcp.app.profiles.guide import ALPS_GUIDE


class AlpsService(ProfileAdapter):
    """ALPS 프로파일 검증과 DOT 변환을 담당하는 어댑터예요.

    `ProfileError`는 실패 결과로 바꿔 돌려주고, 그 밖의 예외는 호출자에게 올려보내요.
    """

    def validate(self, content: str) -> ValidationOutcome:
        try:
            profile = load_profile(content)
        except ProfileError as exc:
            return ValidationOutcome(valid=False, message=exc.message)

        return ValidationOutcome(
            valid=True,
            message="ALPS profile is valid",
            descriptors=len(profile.descriptors),
            links=len(profile.links),
        )

    def render(self, content: str, use_title: bool = False) -> RenderOutcome:
        try:
            profile = load_profile(content)
        except ProfileError as exc:
            return RenderOutcome(success=False, error=exc.message)

        return RenderOutcome(success=True, document=render_dot(profile, use_title=use_title))

    def guide(self) -> str:
        return ALPS_GUIDE
