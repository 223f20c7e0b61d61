from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from capacity_ledger.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Capacity(Base):
    __tablename__ = "capacities"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    sprint_id = Column(Integer, ForeignKey("sprints.id", ondelete="CASCADE"), nullable=False, index=True)
    days_sprint = Column(Integer, nullable=False)
    # share of the sprint spent on run/maintenance work, in percent
    percent_run = Column(Numeric(5, 2), nullable=False, default=100, server_default="100")
    date_calculated = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    team = relationship("Team", back_populates="capacities")
    sprint = relationship("Sprint", back_populates="capacities")
    roles = relationship("CapacityRole", back_populates="capacity", passive_deletes="all")

    __table_args__ = (
        # One capacity per team/sprint; the upsert conflicts on this.
        UniqueConstraint("team_id", "sprint_id", name="uq_capacity_team_sprint"),
    )

    def __repr__(self) -> str:
        return f"<Capacity id={self.id} team={self.team_id} sprint={self.sprint_id} days={self.days_sprint}>"
