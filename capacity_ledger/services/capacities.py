"""Capacity persistence, including the one-row-per-sprint upsert."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from capacity_ledger.models.capacity import Capacity, utcnow

logger = logging.getLogger("capacities")

_NATIVE_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def list_capacities(db: AsyncSession, team_id: int) -> List[Capacity]:
    rows = await db.execute(
        select(Capacity)
        .where(Capacity.team_id == team_id)
        .order_by(Capacity.date_calculated.desc(), Capacity.id.desc())
    )
    return list(rows.scalars().all())


async def get_capacity(db: AsyncSession, team_id: int, sprint_id: int) -> Optional[Capacity]:
    """Return the capacity of a sprint, or ``None`` when nothing was recorded yet."""
    rows = await db.execute(
        select(Capacity).where(Capacity.team_id == team_id, Capacity.sprint_id == sprint_id)
    )
    return rows.scalar_one_or_none()


async def upsert_capacity(
    db: AsyncSession,
    *,
    team_id: int,
    sprint_id: int,
    days_sprint: int,
    percent_run: Decimal,
) -> Capacity:
    """Create or overwrite the capacity of ``(team_id, sprint_id)``.

    On PostgreSQL and SQLite this is a single ``INSERT ... ON CONFLICT DO
    UPDATE`` against the ``uq_capacity_team_sprint`` constraint, so concurrent
    callers can never leave two rows for the same pair. ``date_calculated``
    is reset to the current time on every call.
    """

    insert = _NATIVE_UPSERT_DIALECTS.get(db.get_bind().dialect.name)
    if insert is None:
        capacity = await _upsert_with_fallback(
            db,
            team_id=team_id,
            sprint_id=sprint_id,
            days_sprint=days_sprint,
            percent_run=percent_run,
        )
    else:
        stmt = insert(Capacity).values(
            team_id=team_id,
            sprint_id=sprint_id,
            days_sprint=days_sprint,
            percent_run=percent_run,
            date_calculated=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Capacity.team_id, Capacity.sprint_id],
            set_={
                "days_sprint": stmt.excluded.days_sprint,
                "percent_run": stmt.excluded.percent_run,
                "date_calculated": stmt.excluded.date_calculated,
            },
        ).returning(Capacity)
        result = await db.scalars(stmt, execution_options={"populate_existing": True})
        capacity = result.one()
        await db.commit()

    logger.info(
        "Capacity %s saved for team=%s sprint=%s (days=%s, run=%s%%)",
        capacity.id,
        team_id,
        sprint_id,
        days_sprint,
        percent_run,
    )
    return capacity


async def _upsert_with_fallback(
    db: AsyncSession,
    *,
    team_id: int,
    sprint_id: int,
    days_sprint: int,
    percent_run: Decimal,
) -> Capacity:
    """Insert-then-update for dialects without ON CONFLICT.

    The unique constraint still decides: a racing insert fails with an
    IntegrityError and the existing row is updated instead.
    """

    capacity = await get_capacity(db, team_id, sprint_id)
    if capacity is None:
        capacity = Capacity(
            team_id=team_id,
            sprint_id=sprint_id,
            days_sprint=days_sprint,
            percent_run=percent_run,
            date_calculated=utcnow(),
        )
        db.add(capacity)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            capacity = await get_capacity(db, team_id, sprint_id)
            if capacity is None:
                # not a uniqueness conflict (e.g. unknown team or sprint)
                raise
        else:
            await db.refresh(capacity)
            return capacity

    capacity.days_sprint = days_sprint
    capacity.percent_run = percent_run
    capacity.date_calculated = utcnow()
    await db.commit()
    await db.refresh(capacity)
    return capacity
