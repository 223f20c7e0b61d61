import asyncio
import logging

import capacity_ledger.database as database


async def main() -> None:
    """Create tables and apply upgrades once, as a deployment step."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    try:
        await database.init_models()
    finally:
        await database.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
