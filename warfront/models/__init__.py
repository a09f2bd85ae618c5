from warfront.models.batch import Batch, BatchType, next_batch_label, validate_supply
from warfront.models.claim import ClaimResult
from warfront.models.failure import (
    ApiResponse,
    AuthError,
    ConflictError,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    OutcomeType,
    PermissionDeniedError,
    ValidationError,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
)
from warfront.models.roles import ADMIN_ROLES, PRIVILEGED_ROLES, Role
from warfront.models.verification import TokenValidation

__all__ = [
    "ADMIN_ROLES",
    "PRIVILEGED_ROLES",
    "ApiResponse",
    "AuthError",
    "Batch",
    "BatchType",
    "ClaimResult",
    "ConflictError",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "NotFoundError",
    "OutcomeType",
    "PermissionDeniedError",
    "Role",
    "TokenValidation",
    "ValidationError",
    "create_known_failure",
    "create_unknown_failure",
    "finalize_response",
    "next_batch_label",
    "validate_supply",
]
