"""
Project model. Each project carries its own time accounting parameters.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from punch.constants import DEFAULT_OVERHEAD_MINUTES
from punch.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, unique=True, nullable=False)
    overhead_minutes = Column(Integer, nullable=False, default=DEFAULT_OVERHEAD_MINUTES)
    time_zone = Column(String, nullable=True)  # IANA name; NULL = settings.TIME_ZONE
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    user = relationship("User", back_populates="projects")
    events = relationship("Event", back_populates="project", order_by="Event.clock")
