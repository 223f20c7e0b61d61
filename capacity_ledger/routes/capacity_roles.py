# capacity_ledger/routes/capacity_roles.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from capacity_ledger.database import get_db
from capacity_ledger.models.capacity_role import CapacityRole
from capacity_ledger.schemas import ActionResult, CapacityRoleRead, CapacityRoleUpsert

logger = logging.getLogger("capacity_roles")

router = APIRouter(tags=["Capacity roles"])


@router.get("/capacity_roles/{capacity_id}", response_model=List[CapacityRoleRead])
async def list_capacity_roles(capacity_id: int, db: AsyncSession = Depends(get_db)):
    rows = await db.execute(
        select(CapacityRole).where(CapacityRole.capacity_id == capacity_id).order_by(CapacityRole.id)
    )
    return rows.scalars().all()


@router.post("/capacity_role", response_model=CapacityRoleRead)
async def save_capacity_role(payload: CapacityRoleUpsert, db: AsyncSession = Depends(get_db)):
    """Update the line named by ``id``, or add a new line to the capacity.

    Duplicate role labels under one capacity are not prevented.
    """
    if payload.id:
        line = await db.get(CapacityRole, payload.id)
        if line is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Capacity role not found")
        # capacity_id is not re-checked; the id alone selects the row
        line.role = payload.role
        line.nbr_personnes = payload.nbr_personnes
        line.jours_absence = payload.jours_absence
    else:
        line = CapacityRole(
            capacity_id=payload.capacity_id,
            role=payload.role,
            nbr_personnes=payload.nbr_personnes,
            jours_absence=payload.jours_absence,
        )
        db.add(line)

    await db.commit()
    await db.refresh(line)
    logger.info("Saved capacity role %s (%s) on capacity %s", line.id, line.role, line.capacity_id)
    return line


@router.delete("/capacity_role/{line_id}", response_model=ActionResult)
async def delete_capacity_role(line_id: int, db: AsyncSession = Depends(get_db)):
    await db.execute(delete(CapacityRole).where(CapacityRole.id == line_id))
    await db.commit()
    logger.info("Deleted capacity role %s", line_id)
    return ActionResult()
