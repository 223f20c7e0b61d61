import asyncio
import logging

import capacity_ledger.database as database
from capacity_ledger.models.role import Role
from sqlalchemy import select

DEFAULT_ROLES = (
    "Business Analyst",
    "Developer",
    "Product Owner",
    "Scrum Master",
    "Tester",
)

logger = logging.getLogger("seed_roles")


async def seed_roles(session, names=DEFAULT_ROLES) -> list[str]:
    """Insert catalog entries that are missing; returns the names added."""

    existing = set((await session.execute(select(Role.name))).scalars().all())
    added = [name for name in names if name not in existing]
    session.add_all([Role(name=name) for name in added])
    await session.commit()
    return added


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    await database.init_models()
    try:
        async with database.SessionLocal() as session:
            added = await seed_roles(session)
        logger.info("Seeded %s roles: %s", len(added), ", ".join(added) or "none")
    finally:
        await database.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
