# capacity_ledger/routes/capacities.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from capacity_ledger.database import get_db
from capacity_ledger.models.capacity import Capacity
from capacity_ledger.schemas import ActionResult, CapacityRead, CapacityUpsert
from capacity_ledger.services import capacities as capacity_service

logger = logging.getLogger("capacities")

router = APIRouter(tags=["Capacities"])


@router.get("/capacities/{team_id}", response_model=List[CapacityRead])
async def list_capacities(team_id: int, db: AsyncSession = Depends(get_db)):
    """All capacities of a team, most recently calculated first."""
    return await capacity_service.list_capacities(db, team_id)


@router.get("/capacity/{team_id}/{sprint_id}", response_model=Optional[CapacityRead])
async def get_capacity(team_id: int, sprint_id: int, db: AsyncSession = Depends(get_db)):
    # A sprint without capacity is a normal state: answer null, not 404.
    return await capacity_service.get_capacity(db, team_id, sprint_id)


@router.post("/capacity", response_model=CapacityRead)
async def save_capacity(payload: CapacityUpsert, db: AsyncSession = Depends(get_db)):
    return await capacity_service.upsert_capacity(
        db,
        team_id=payload.team_id,
        sprint_id=payload.sprint_id,
        days_sprint=payload.days_sprint,
        percent_run=payload.percent_run,
    )


@router.delete("/capacity/{capacity_id}", response_model=ActionResult)
async def delete_capacity(capacity_id: int, db: AsyncSession = Depends(get_db)):
    await db.execute(delete(Capacity).where(Capacity.id == capacity_id))
    await db.commit()
    logger.info("Deleted capacity %s", capacity_id)
    return ActionResult()
