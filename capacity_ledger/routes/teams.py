# capacity_ledger/routes/teams.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from capacity_ledger.database import get_db
from capacity_ledger.models.team import Team
from capacity_ledger.schemas import ActionResult, TeamCreate, TeamRead

logger = logging.getLogger("teams")

router = APIRouter(tags=["Teams"])


@router.get("/teams", response_model=List[TeamRead])
async def list_teams(db: AsyncSession = Depends(get_db)):
    rows = await db.execute(select(Team).order_by(Team.name))
    return rows.scalars().all()


@router.post("/teams", response_model=TeamRead)
async def create_team(payload: TeamCreate, db: AsyncSession = Depends(get_db)):
    if not payload.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Team name is required")

    team = Team(name=payload.name)
    db.add(team)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Rejected duplicate team name %r", payload.name)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Team name already exists")
    await db.refresh(team)
    logger.info("Created team %s (%s)", team.id, team.name)
    return team


# Renaming is not supported; there is deliberately no PUT/PATCH.

@router.delete("/teams/{team_id}", response_model=ActionResult)
async def delete_team(team_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a team; sprints, capacities and capacity roles follow by cascade."""
    await db.execute(delete(Team).where(Team.id == team_id))
    await db.commit()
    logger.info("Deleted team %s", team_id)
    return ActionResult()
