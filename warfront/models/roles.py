from enum import Enum


class Role(str, Enum):
    """Account roles."""

    ADMIN = "admin"
    USER = "user"
    MEMBER = "member"
    GUEST = "guest"
    OWNER = "owner"
    STAFF = "staff"
    TEST = "test"
    CARDSETTER = "cardsetter"


# Roles allowed to edit cards, batches and claim tokens
PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.OWNER, Role.CARDSETTER})

# Roles allowed to manage accounts
ADMIN_ROLES = frozenset({Role.ADMIN, Role.OWNER})
