"""
Warfront services.

Business rules for card claiming, batch numbering and the social features.
"""

from warfront.services.auth import login, logout, require_user, resolve_session, signup
from warfront.services.authz import is_admin, is_privileged, require_admin, require_privileged
from warfront.services.batch_allocator import (
    add_batch,
    list_batches,
    mark_batch_complete,
    mint_from_batch,
)
from warfront.services.claim_tokens import (
    IssuedToken,
    consume_verify_token,
    issue_verify_token,
    redeem_verify_token,
    validate_verify_token,
)
from warfront.services.claims import add_with_claim_code, list_inventory

__all__ = [
    "IssuedToken",
    "add_batch",
    "add_with_claim_code",
    "consume_verify_token",
    "is_admin",
    "is_privileged",
    "issue_verify_token",
    "list_batches",
    "list_inventory",
    "login",
    "logout",
    "mark_batch_complete",
    "mint_from_batch",
    "redeem_verify_token",
    "require_admin",
    "require_privileged",
    "require_user",
    "resolve_session",
    "signup",
    "validate_verify_token",
]
