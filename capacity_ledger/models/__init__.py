"""SQLAlchemy models; importing the package registers every table on ``Base``."""
from capacity_ledger.models.capacity import Capacity
from capacity_ledger.models.capacity_role import CapacityRole
from capacity_ledger.models.role import Role
from capacity_ledger.models.sprint import Sprint
from capacity_ledger.models.team import Team

__all__ = [
    "Capacity",
    "CapacityRole",
    "Role",
    "Sprint",
    "Team",
]
