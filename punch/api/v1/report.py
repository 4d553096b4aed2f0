"""
Report endpoint: day and week totals of gross and net time.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from punch.core.deps import get_db, get_current_project
from punch.models.project import Project
from punch.schemas.report import ReportResult
from punch.services.report_service import summary_report

router = APIRouter()


@router.get("/report", response_model=ReportResult)
async def get_report(
    include_open: bool = Query(True, description="Count a session in progress up to now"),
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """
    Summary report for the current project

    Days and weeks are most recent first; durations are in seconds with a display
    string (e.g. 4h15m). `anomalies` lists malformed parts of the event log that
    were left out of the totals. `next_direction` is the punch to offer next.
    """
    return summary_report(db, project_id=project.id, include_open=include_open)
