"""Idempotent schema upgrades applied after metadata.create_all()."""
from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncConnection

logger = logging.getLogger("schema_upgrades")

CAPACITY_PAIR_INDEX = "uq_capacity_team_sprint"


async def ensure_date_calculated_backfilled(conn: AsyncConnection) -> None:
    # NULL stamps never compare, so duplicates carrying them would survive the collapse
    await conn.execute(
        text("UPDATE capacities SET date_calculated = CURRENT_TIMESTAMP WHERE date_calculated IS NULL")
    )


async def ensure_date_calculated_timezone(conn: AsyncConnection) -> None:
    """Legacy Postgres tables store a naive TIMESTAMP; the app writes aware UTC values."""

    if conn.dialect.name != "postgresql":
        # SQLite keeps no zone information either way
        return

    result = await conn.execute(
        text(
            "SELECT data_type FROM information_schema.columns "
            "WHERE table_name = 'capacities' AND column_name = 'date_calculated' "
            "AND table_schema = current_schema()"
        )
    )
    if result.scalar_one_or_none() != "timestamp without time zone":
        return

    await conn.execute(
        text(
            "ALTER TABLE capacities ALTER COLUMN date_calculated TYPE TIMESTAMPTZ "
            "USING date_calculated AT TIME ZONE 'UTC'"
        )
    )
    logger.info("Converted capacities.date_calculated to TIMESTAMPTZ")


async def collapse_duplicate_capacities(conn: AsyncConnection) -> int:
    """Keep only the newest capacity per (team_id, sprint_id).

    Tables created by the old bootstrap had no uniqueness on the pair, so
    concurrent writers could leave several rows behind. Roles attached to
    the discarded rows go with them through the cascade.
    """

    result = await conn.execute(
        text(
            "DELETE FROM capacities WHERE id IN ("
            " SELECT c.id FROM capacities c"
            " JOIN capacities newer"
            "   ON newer.team_id = c.team_id AND newer.sprint_id = c.sprint_id"
            "  AND (newer.date_calculated > c.date_calculated"
            "       OR (newer.date_calculated = c.date_calculated AND newer.id > c.id))"
            ")"
        )
    )
    removed = result.rowcount or 0
    if removed:
        logger.warning("Removed %s duplicate capacity rows before enforcing uniqueness", removed)
    return removed


async def ensure_capacity_pair_unique(conn: AsyncConnection) -> None:
    await collapse_duplicate_capacities(conn)

    ddl = text(
        f"CREATE UNIQUE INDEX IF NOT EXISTS {CAPACITY_PAIR_INDEX} "
        "ON capacities (team_id, sprint_id)"
    )
    try:
        await conn.execute(ddl)
    except DBAPIError as ddl_error:
        # create_all() may already have built it as a named table constraint
        message = str(getattr(ddl_error, "orig", ddl_error)).lower()
        if "already exists" not in message:
            raise


async def ensure_percent_run_backfilled(conn: AsyncConnection) -> None:
    await conn.execute(text("UPDATE capacities SET percent_run = 100 WHERE percent_run IS NULL"))


async def ensure_absence_backfilled(conn: AsyncConnection) -> None:
    await conn.execute(text("UPDATE capacity_roles SET jours_absence = 0 WHERE jours_absence IS NULL"))


def upgrade_order() -> tuple:
    return (
        ensure_date_calculated_backfilled,
        ensure_date_calculated_timezone,
        ensure_capacity_pair_unique,
        ensure_percent_run_backfilled,
        ensure_absence_backfilled,
    )


async def run_post_creation_upgrades(conn: AsyncConnection) -> None:
    for step in upgrade_order():
        await step(conn)
