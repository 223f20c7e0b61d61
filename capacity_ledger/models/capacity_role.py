from sqlalchemy import Column, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship

from capacity_ledger.database import Base


class CapacityRole(Base):
    """Headcount and absence line for one role inside a capacity.

    ``role`` is free text. It is not tied to the ``roles`` catalog, so labels
    the catalog does not know are accepted.
    """

    __tablename__ = "capacity_roles"

    id = Column(Integer, primary_key=True, index=True)
    capacity_id = Column(Integer, ForeignKey("capacities.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Text, nullable=False)
    nbr_personnes = Column(Integer, nullable=False)
    jours_absence = Column(Numeric(5, 2), nullable=False, default=0, server_default="0")

    capacity = relationship("Capacity", back_populates="roles")
