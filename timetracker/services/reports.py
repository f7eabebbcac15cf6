"""Report service - per-user and per-project totals over closed entries."""
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from ..core.timecalc import minutes_to_hours, to_utc
from ..database.models import Project, TimeEntry, User
from ..schemas.time_tracking import ProjectSummaryReference
from ..schemas.user import UserReference

GroupedRow = Tuple[UUID, Optional[int], int]


def summarize(rows: Iterable[GroupedRow], references: Dict[UUID, Any],
              serialize: Callable[[Any], Any], key: str) -> List[Dict[str, Any]]:
    """
    Turn grouped ``(id, minutes, count)`` rows into report rows.

    A row whose id is missing from ``references`` keeps a null reference so
    the totals still add up.
    """
    summary = []
    for ref_id, minutes, count in rows:
        reference = references.get(ref_id)
        total_minutes = int(minutes or 0)
        summary.append({
            key: serialize(reference) if reference is not None else None,
            "total_minutes": total_minutes,
            "total_hours": minutes_to_hours(total_minutes),
            "entry_count": count,
        })
    return summary


class ReportService:
    """Service computing the admin summary report."""

    def __init__(self, db: Session):
        self.db = db

    def _closed_entries_grouped_by(self, column, start_date: Optional[datetime],
                                   end_date: Optional[datetime]) -> List[GroupedRow]:
        total = func.sum(TimeEntry.duration)
        query = self.db.query(column, total, func.count(TimeEntry.id)).filter(
            TimeEntry.end_time.isnot(None)
        )
        if start_date:
            query = query.filter(TimeEntry.start_time >= to_utc(start_date))
        if end_date:
            query = query.filter(TimeEntry.start_time <= to_utc(end_date))
        return query.group_by(column).order_by(desc(total), column).all()

    def summary(self, start_date: Optional[datetime] = None,
                end_date: Optional[datetime] = None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Aggregate closed time entries by user and by project.

        Args:
            start_date: Optional inclusive lower bound on start time
            end_date: Optional inclusive upper bound on start time

        Returns:
            Dict with ``user_summary`` and ``project_summary`` rows
        """
        user_rows = self._closed_entries_grouped_by(TimeEntry.user_id, start_date, end_date)
        project_rows = self._closed_entries_grouped_by(TimeEntry.project_id, start_date, end_date)

        user_ids = [row[0] for row in user_rows]
        project_ids = [row[0] for row in project_rows]
        users = {u.id: u for u in self.db.query(User).filter(User.id.in_(user_ids)).all()} if user_ids else {}
        projects = {p.id: p for p in self.db.query(Project).filter(Project.id.in_(project_ids)).all()} if project_ids else {}

        return {
            "user_summary": summarize(user_rows, users, UserReference.model_validate, "user"),
            "project_summary": summarize(project_rows, projects, ProjectSummaryReference.model_validate, "project"),
        }
