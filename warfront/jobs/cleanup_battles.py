"""
Scheduled job to sweep idle battle lobbies.

Deletes 1v1 battles that are still Open or Full and multiplayer lobbies
still Waiting once they have seen no activity for
`settings.battle_inactivity_minutes`. Runs every few minutes.
"""

import asyncio
import logging
from datetime import datetime, timedelta

from warfront.config import settings
from warfront.db.battles import delete_idle_battles, delete_idle_multiplayer_battles
from warfront.db.database import async_session_factory
from warfront.models.db import utcnow

logger = logging.getLogger(__name__)


async def run_battle_cleanup(now: datetime | None = None) -> dict[str, int]:
    """
    Delete idle lobbies.

    Returns:
        Dict with the number of 1v1 battles and multiplayer lobbies removed
    """
    cutoff = (now or utcnow()) - timedelta(minutes=settings.battle_inactivity_minutes)

    async with async_session_factory() as session:
        battles = await delete_idle_battles(session, cutoff)
        lobbies = await delete_idle_multiplayer_battles(session, cutoff)
        await session.commit()

    logger.info("Removed %d idle battles and %d idle lobbies", battles, lobbies)
    return {"battles": battles, "multiplayer": lobbies}


def main() -> None:
    """CLI entry point for the battle sweep."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_battle_cleanup())


if __name__ == "__main__":
    main()
