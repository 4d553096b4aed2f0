"""
Dependencies for FastAPI endpoints
"""
from typing import Generator
from fastapi import Depends
from sqlalchemy.orm import Session
from punch.db.session import SessionLocal
from punch.models.project import Project
from punch.services.event_store import load_project


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_project(db: Session = Depends(get_db)) -> Project:
    """
    The project punches and reports apply to.

    Single user, single project: the first project of the first user.
    """
    return load_project(db)
