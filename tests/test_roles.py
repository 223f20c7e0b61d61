import pytest
from fastapi import HTTPException

from capacity_ledger.routes import roles
from capacity_ledger.schemas import RoleCreate

pytestmark = pytest.mark.anyio


async def test_roles_are_listed_alphabetically(session):
    for name in ("Tester", "Developer", "Scrum Master"):
        await roles.create_role(RoleCreate(name=name), db=session)

    listed = await roles.list_roles(db=session)
    assert [role.name for role in listed] == ["Developer", "Scrum Master", "Tester"]


@pytest.mark.parametrize("name", [None, "", "   "])
async def test_missing_name_is_rejected_before_writing(session, name):
    with pytest.raises(HTTPException) as excinfo:
        await roles.create_role(RoleCreate(name=name), db=session)

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail == "Role name is required"
    assert await roles.list_roles(db=session) == []


async def test_duplicate_name_is_a_conflict(session):
    await roles.create_role(RoleCreate(name="Developer"), db=session)

    with pytest.raises(HTTPException) as excinfo:
        await roles.create_role(RoleCreate(name="Developer"), db=session)

    assert excinfo.value.status_code == 409
    assert excinfo.value.detail == "Role already exists"
    assert len(await roles.list_roles(db=session)) == 1


async def test_names_are_trimmed(session):
    role = await roles.create_role(RoleCreate(name="  Product Owner  "), db=session)
    assert role.name == "Product Owner"


async def test_delete_is_unconditional(session):
    role = await roles.create_role(RoleCreate(name="Developer"), db=session)

    assert (await roles.delete_role(role_id=role.id, db=session)).success is True
    assert (await roles.delete_role(role_id=role.id, db=session)).success is True
    assert await roles.list_roles(db=session) == []


async def test_long_names_are_accepted(session):
    long_name = "Platform Reliability " * 20
    role = await roles.create_role(RoleCreate(name=long_name), db=session)
    assert role.name == long_name.strip()
