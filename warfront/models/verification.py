from dataclasses import dataclass
from typing import Literal

TokenFailureReason = Literal["not found", "expired", "mismatched card"]


@dataclass(frozen=True)
class TokenValidation:
    """
    Outcome of checking a verification token.

    `reason` is set only when `valid` is False.
    """

    valid: bool
    reason: TokenFailureReason | None = None

    @classmethod
    def ok(cls) -> "TokenValidation":
        return cls(valid=True)

    @classmethod
    def rejected(cls, reason: TokenFailureReason) -> "TokenValidation":
        return cls(valid=False, reason=reason)
