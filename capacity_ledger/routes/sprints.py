# capacity_ledger/routes/sprints.py

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from capacity_ledger.database import get_db
from capacity_ledger.models.sprint import Sprint
from capacity_ledger.schemas import ActionResult, SprintCreate, SprintRead

logger = logging.getLogger("sprints")

router = APIRouter(tags=["Sprints"])


@router.get("/sprints/{team_id}", response_model=List[SprintRead])
async def list_sprints(team_id: int, db: AsyncSession = Depends(get_db)):
    # ids are assigned monotonically, so this is creation order
    rows = await db.execute(select(Sprint).where(Sprint.team_id == team_id).order_by(Sprint.id))
    return rows.scalars().all()


@router.post("/sprints", response_model=SprintRead)
async def create_sprint(payload: SprintCreate, db: AsyncSession = Depends(get_db)):
    sprint = Sprint(
        team_id=payload.team_id,
        name=payload.name,
        capacity=payload.capacity,
        done=payload.done,
    )
    db.add(sprint)
    await db.commit()
    await db.refresh(sprint)
    logger.info("Created sprint %s for team %s", sprint.id, sprint.team_id)
    return sprint


@router.delete("/sprints/team/{team_id}", response_model=ActionResult)
async def delete_team_sprints(team_id: int, db: AsyncSession = Depends(get_db)):
    """Drop every sprint of a team, e.g. before rebuilding its plan."""
    result = await db.execute(delete(Sprint).where(Sprint.team_id == team_id))
    await db.commit()
    logger.info("Deleted %s sprints of team %s", result.rowcount, team_id)
    return ActionResult()


@router.delete("/sprints/{sprint_id}", response_model=ActionResult)
async def delete_sprint(sprint_id: int, db: AsyncSession = Depends(get_db)):
    await db.execute(delete(Sprint).where(Sprint.id == sprint_id))
    await db.commit()
    logger.info("Deleted sprint %s", sprint_id)
    return ActionResult()
