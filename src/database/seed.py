"""
Initial catalog rows (achievements, places, quests)

Idempotent: each table is filled only while it is empty, so running the
seed on every startup never duplicates rows.
"""

from typing import Dict, List

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import SEED_ACHIEVEMENTS, SEED_PLACES, SEED_QUESTS
from src.database.models import Achievement, Place, Quest


async def _is_empty(session: AsyncSession, model) -> bool:
    return not await session.scalar(select(func.count()).select_from(model))


async def seed_database(session: AsyncSession) -> Dict[str, int]:
    """
    Insert seed rows into empty tables

    Returns:
        Number of rows inserted per table
    """
    inserted = {"achievements": 0, "places": 0, "quests": 0}

    if await _is_empty(session, Achievement):
        session.add_all(Achievement(**row) for row in SEED_ACHIEVEMENTS)
        inserted["achievements"] = len(SEED_ACHIEVEMENTS)

    places: List[Place] = []
    if await _is_empty(session, Place):
        places = [Place(**row) for row in SEED_PLACES]
        session.add_all(places)
        await session.flush()
        inserted["places"] = len(places)

    # Quests reference the seeded places, so they are only added alongside them
    if places and await _is_empty(session, Quest):
        for row in SEED_QUESTS:
            fields = {k: v for k, v in row.items() if k != "place_index"}
            session.add(Quest(place_id=places[row["place_index"]].id, **fields))
        inserted["quests"] = len(SEED_QUESTS)

    await session.commit()

    if any(inserted.values()):
        logger.info(f"Seed data inserted: {inserted}")
    else:
        logger.debug("Seed data already present")

    return inserted
