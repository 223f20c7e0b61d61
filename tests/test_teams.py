import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from capacity_ledger.models.capacity import Capacity
from capacity_ledger.models.capacity_role import CapacityRole
from capacity_ledger.models.sprint import Sprint
from capacity_ledger.routes import capacity_roles, sprints, teams
from capacity_ledger.schemas import CapacityRoleUpsert, SprintCreate, TeamCreate
from capacity_ledger.services.capacities import upsert_capacity

pytestmark = pytest.mark.anyio


async def _count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def test_teams_are_listed_by_name(session):
    for name in ("Gamma", "Alpha", "Beta"):
        await teams.create_team(TeamCreate(name=name), db=session)

    listed = await teams.list_teams(db=session)
    assert [team.name for team in listed] == ["Alpha", "Beta", "Gamma"]


async def test_duplicate_team_name_is_rejected(session):
    first = await teams.create_team(TeamCreate(name="Alpha"), db=session)
    assert first.id is not None

    with pytest.raises(HTTPException) as excinfo:
        await teams.create_team(TeamCreate(name="Alpha"), db=session)

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail == "Team name already exists"
    assert [team.name for team in await teams.list_teams(db=session)] == ["Alpha"]


async def test_blank_team_name_is_a_client_error(session):
    with pytest.raises(HTTPException) as excinfo:
        await teams.create_team(TeamCreate(name="   "), db=session)

    assert excinfo.value.status_code == 400
    assert await teams.list_teams(db=session) == []


async def test_deleting_a_team_cascades_to_every_descendant(session):
    alpha = await teams.create_team(TeamCreate(name="Alpha"), db=session)
    beta = await teams.create_team(TeamCreate(name="Beta"), db=session)

    s1 = await sprints.create_sprint(SprintCreate(team_id=alpha.id, name="S1", capacity=20, done=0), db=session)
    s2 = await sprints.create_sprint(SprintCreate(team_id=alpha.id, name="S2", capacity=18, done=3), db=session)
    other = await sprints.create_sprint(SprintCreate(team_id=beta.id, name="B1"), db=session)

    for sprint in (s1, s2):
        capacity = await upsert_capacity(
            session, team_id=alpha.id, sprint_id=sprint.id, days_sprint=10, percent_run=80
        )
        await capacity_roles.save_capacity_role(
            CapacityRoleUpsert(capacity_id=capacity.id, role="Developer", nbr_personnes=4),
            db=session,
        )
    kept = await upsert_capacity(session, team_id=beta.id, sprint_id=other.id, days_sprint=8, percent_run=100)
    await capacity_roles.save_capacity_role(
        CapacityRoleUpsert(capacity_id=kept.id, role="Tester", nbr_personnes=1),
        db=session,
    )

    result = await teams.delete_team(team_id=alpha.id, db=session)
    assert result.success is True

    assert [s.id for s in (await session.execute(select(Sprint))).scalars().all()] == [other.id]
    assert [c.id for c in (await session.execute(select(Capacity))).scalars().all()] == [kept.id]
    remaining_roles = (await session.execute(select(CapacityRole))).scalars().all()
    assert [r.capacity_id for r in remaining_roles] == [kept.id]


async def test_deleting_unknown_team_still_succeeds(session):
    result = await teams.delete_team(team_id=999, db=session)
    assert result.success is True
    assert await _count(session, Sprint) == 0


async def test_long_team_names_are_accepted(session):
    long_name = "x" * 500
    team = await teams.create_team(TeamCreate(name=long_name), db=session)
    assert team.name == long_name
