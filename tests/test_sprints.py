import pytest
from sqlalchemy import select

from capacity_ledger.models.capacity import Capacity
from capacity_ledger.routes import sprints, teams
from capacity_ledger.schemas import SprintCreate, TeamCreate
from capacity_ledger.services.capacities import get_capacity, upsert_capacity

pytestmark = pytest.mark.anyio


async def test_sprints_are_listed_per_team_in_creation_order(session):
    alpha = await teams.create_team(TeamCreate(name="Alpha"), db=session)
    beta = await teams.create_team(TeamCreate(name="Beta"), db=session)

    for name in ("Z-sprint", "A-sprint", "M-sprint"):
        await sprints.create_sprint(SprintCreate(team_id=alpha.id, name=name), db=session)
    await sprints.create_sprint(SprintCreate(team_id=beta.id, name="Other"), db=session)

    listed = await sprints.list_sprints(team_id=alpha.id, db=session)
    assert [s.name for s in listed] == ["Z-sprint", "A-sprint", "M-sprint"]
    assert [s.id for s in listed] == sorted(s.id for s in listed)


async def test_sprint_fields_are_stored_as_given(session):
    alpha = await teams.create_team(TeamCreate(name="Alpha"), db=session)

    sprint = await sprints.create_sprint(
        SprintCreate(team_id=alpha.id, name="S1", capacity=20, done=0), db=session
    )
    bare = await sprints.create_sprint(SprintCreate(team_id=alpha.id), db=session)

    assert (sprint.name, sprint.capacity, sprint.done) == ("S1", 20, 0)
    assert (bare.name, bare.capacity, bare.done) == (None, None, None)


async def test_deleting_a_sprint_removes_its_capacity(session):
    alpha = await teams.create_team(TeamCreate(name="Alpha"), db=session)
    s1 = await sprints.create_sprint(SprintCreate(team_id=alpha.id, name="S1"), db=session)
    s2 = await sprints.create_sprint(SprintCreate(team_id=alpha.id, name="S2"), db=session)
    await upsert_capacity(session, team_id=alpha.id, sprint_id=s1.id, days_sprint=10, percent_run=80)
    await upsert_capacity(session, team_id=alpha.id, sprint_id=s2.id, days_sprint=9, percent_run=70)

    result = await sprints.delete_sprint(sprint_id=s1.id, db=session)

    assert result.success is True
    assert await get_capacity(session, alpha.id, s1.id) is None
    assert await get_capacity(session, alpha.id, s2.id) is not None


async def test_deleting_all_sprints_of_a_team(session):
    alpha = await teams.create_team(TeamCreate(name="Alpha"), db=session)
    beta = await teams.create_team(TeamCreate(name="Beta"), db=session)
    for name in ("S1", "S2"):
        sprint = await sprints.create_sprint(SprintCreate(team_id=alpha.id, name=name), db=session)
        await upsert_capacity(session, team_id=alpha.id, sprint_id=sprint.id, days_sprint=10, percent_run=100)
    await sprints.create_sprint(SprintCreate(team_id=beta.id, name="B1"), db=session)

    await sprints.delete_team_sprints(team_id=alpha.id, db=session)

    assert await sprints.list_sprints(team_id=alpha.id, db=session) == []
    assert [s.name for s in await sprints.list_sprints(team_id=beta.id, db=session)] == ["B1"]
    assert (await session.execute(select(Capacity))).scalars().all() == []
    # the team itself survives
    assert [t.name for t in await teams.list_teams(db=session)] == ["Alpha", "Beta"]


async def test_deleting_unknown_sprint_still_succeeds(session):
    result = await sprints.delete_sprint(sprint_id=12345, db=session)
    assert result.success is True
