"""
Punch event model: the append-only log of in/out/note markers.
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
from punch.db.base import Base


class EventType(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"
    NOTE = "NOTE"


class PunchDirection(str, enum.Enum):
    """The subset of EventType a user punches with"""
    IN = "IN"
    OUT = "OUT"

    @property
    def event_type(self) -> EventType:
        return EventType(self.value)


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    event_type = Column(SQLEnum(EventType), nullable=False)
    clock = Column(DateTime(timezone=True), nullable=False, index=True)  # UTC
    note = Column(Text, nullable=True)

    project = relationship("Project", back_populates="events")
