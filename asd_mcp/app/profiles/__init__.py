from asd_mcp.app.profiles.alps_service import AlpsService
from asd_mcp.app.profiles.base import ProfileAdapter, ProfileError, RenderOutcome, ValidationOutcome

__all__ = [
    "AlpsService",
    "ProfileAdapter",
    "ProfileError",
    "RenderOutcome",
    "ValidationOutcome",
]
