from sqlalchemy import Column, Integer, Text
from sqlalchemy.orm import relationship

from capacity_ledger.database import Base


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, unique=True, nullable=False)

    # Children are removed by ON DELETE CASCADE; the ORM never touches them.
    sprints = relationship("Sprint", back_populates="team", passive_deletes="all")
    capacities = relationship("Capacity", back_populates="team", passive_deletes="all")

    def __repr__(self) -> str:
        return f"<Team id={self.id} name={self.name!r}>"
