from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from capacity_ledger.database import Base


class Sprint(Base):
    __tablename__ = "sprints"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text)
    # planned capacity, informational only
    capacity = Column(Integer)
    done = Column(Integer)

    team = relationship("Team", back_populates="sprints")
    capacities = relationship("Capacity", back_populates="sprint", passive_deletes="all")

    def __repr__(self) -> str:
        return f"<Sprint id={self.id} team={self.team_id} name={self.name!r}>"
