# capacity_ledger/routes/roles.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from capacity_ledger.database import get_db
from capacity_ledger.models.role import Role
from capacity_ledger.schemas import ActionResult, RoleCreate, RoleRead

logger = logging.getLogger("roles")

router = APIRouter(tags=["Roles"])


@router.get("/roles", response_model=List[RoleRead])
async def list_roles(db: AsyncSession = Depends(get_db)):
    rows = await db.execute(select(Role).order_by(Role.name))
    return rows.scalars().all()


@router.post("/roles", response_model=RoleRead)
async def create_role(payload: RoleCreate, db: AsyncSession = Depends(get_db)):
    if not payload.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Role name is required")

    role = Role(name=payload.name)
    db.add(role)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Rejected duplicate role %r", payload.name)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Role already exists")
    await db.refresh(role)
    logger.info("Created role %s (%s)", role.id, role.name)
    return role


@router.delete("/roles/{role_id}", response_model=ActionResult)
async def delete_role(role_id: int, db: AsyncSession = Depends(get_db)):
    await db.execute(delete(Role).where(Role.id == role_id))
    await db.commit()
    logger.info("Deleted role %s", role_id)
    return ActionResult()
