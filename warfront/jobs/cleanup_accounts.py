"""
Scheduled job to remove stale accounts and expired credentials.

Unverified accounts older than `settings.unverified_account_max_age_days`
are deleted with all of their data. Expired sessions, email verification
tokens and card verify tokens are purged.
"""

import asyncio
import logging
from datetime import datetime, timedelta

from warfront.config import settings
from warfront.db.accounts import (
    delete_expired_email_verification_tokens,
    delete_expired_sessions,
    delete_user,
    list_unverified_users_before,
)
from warfront.db.database import async_session_factory
from warfront.db.operations import delete_expired_card_verify_tokens
from warfront.models.db import utcnow

logger = logging.getLogger(__name__)


async def run_account_cleanup(now: datetime | None = None) -> dict[str, int]:
    """
    Run every account sweep in one transaction.

    Returns:
        Dict mapping sweep name to the number of rows removed
    """
    now = now or utcnow()
    cutoff = now - timedelta(days=settings.unverified_account_max_age_days)

    async with async_session_factory() as session:
        stale_users = await list_unverified_users_before(session, cutoff)
        for user in stale_users:
            logger.info("Deleting unverified account %s", user.id)
            await delete_user(session, user)

        results = {
            "unverified_users": len(stale_users),
            "sessions": await delete_expired_sessions(session, now),
            "email_tokens": await delete_expired_email_verification_tokens(session, now),
            "verify_tokens": await delete_expired_card_verify_tokens(session, now),
        }
        await session.commit()

    logger.info("Account cleanup complete: %s", results)
    return results


def main() -> None:
    """CLI entry point for the account sweep."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_account_cleanup())


if __name__ == "__main__":
    main()
