# capacity_ledger/schemas.py
# ------------------------------------------------------------
# Pydantic v2 schemas, organized by collection
# ------------------------------------------------------------
from datetime import datetime
from decimal import Decimal
import re
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator


_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

# NUMERIC columns come back as Decimal; clients expect plain JSON numbers.
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _sanitize_single_line_text(value: str | None, *, allow_empty: bool = False) -> str | None:
    if value is None:
        return value
    if not isinstance(value, str):
        raise ValueError("Expected string input")
    cleaned = _CONTROL_CHAR_RE.sub("", value).strip()
    if not allow_empty and not cleaned:
        return None
    if any(ch in {"\n", "\r"} for ch in cleaned):
        raise ValueError("Value must be a single line of text")
    return cleaned


class ActionResult(BaseModel):
    success: bool = True


# ============================================================
# Teams
# ============================================================

class TeamCreate(BaseModel):
    # Optional so a missing name reaches the route and gets a 400 there.
    name: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: Optional[str]) -> Optional[str]:
        return _sanitize_single_line_text(value)


class TeamRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# ============================================================
# Sprints
# ============================================================

class SprintCreate(BaseModel):
    team_id: int
    name: Optional[str] = None
    capacity: Optional[int] = None
    done: Optional[int] = None


class SprintRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    name: Optional[str] = None
    capacity: Optional[int] = None
    done: Optional[int] = None


# ============================================================
# Capacities
# ============================================================

class CapacityUpsert(BaseModel):
    team_id: int
    sprint_id: int
    days_sprint: int
    percent_run: Optional[Decimal] = Field(default=Decimal("100"), ge=0, le=999.99)

    @field_validator("percent_run", mode="after")
    @classmethod
    def _default_percent_run(cls, value: Optional[Decimal]) -> Decimal:
        return Decimal("100") if value is None else value


class CapacityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    sprint_id: int
    days_sprint: int
    percent_run: JsonDecimal
    date_calculated: datetime


# ---- Capacity roles ----
class CapacityRoleUpsert(BaseModel):
    id: Optional[int] = None
    capacity_id: int
    role: str = Field(min_length=1)
    nbr_personnes: int
    jours_absence: Optional[Decimal] = Field(default=Decimal("0"), ge=0, le=999.99)

    @field_validator("role", mode="before")
    @classmethod
    def _clean_role(cls, value: str) -> str:
        return _sanitize_single_line_text(value, allow_empty=True)

    @field_validator("jours_absence", mode="after")
    @classmethod
    def _default_absence(cls, value: Optional[Decimal]) -> Decimal:
        return Decimal("0") if value is None else value


class CapacityRoleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    capacity_id: int
    role: str
    nbr_personnes: int
    jours_absence: JsonDecimal


# ============================================================
# Role catalog
# ============================================================

class RoleCreate(BaseModel):
    name: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: Optional[str]) -> Optional[str]:
        return _sanitize_single_line_text(value)


class RoleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
