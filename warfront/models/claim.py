from dataclasses import dataclass

from warfront.models.failure import FailureKind

MSG_CLAIMED = "Card added to inventory."
MSG_CARD_NOT_FOUND = "Card not found"
MSG_INVALID_CODE = "Invalid claim code"
MSG_ALREADY_USED = "This claim code has already been used"
MSG_ALREADY_OWNED = "Card already in inventory."


@dataclass(frozen=True)
class ClaimResult:
    """
    Result of a claim-code submission.

    Rejections are terminal; resubmitting the same request cannot succeed.
    """

    success: bool
    message: str
    kind: FailureKind | None = None
