"""
Database models
"""
from punch.models.user import User
from punch.models.project import Project
from punch.models.event import Event, EventType, PunchDirection

__all__ = [
    "User",
    "Project",
    "Event",
    "EventType",
    "PunchDirection",
]
