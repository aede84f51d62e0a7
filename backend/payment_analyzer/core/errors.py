from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class UserFacingError(Exception):
    """
    An error whose message can be shown to the caller as-is.
    The HTTP layer renders it as {"code", "message", ...}.
    """
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    stage: Optional[str] = None
    status_code: int = 400

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.stage:
            out["stage"] = self.stage
        if self.details:
            out["details"] = self.details
        return out


class InfrastructureError(RuntimeError):
    """Environment failure for one unit of work (hashing, unreadable file)."""
