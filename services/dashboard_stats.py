"""
Dashboard summary: status counts and tasks grouped by sector.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from models import Sector, Task, utcnow
from services import task_service

logger = logging.getLogger(__name__)


def summarize_tasks(tasks: Iterable[Task], now: Optional[datetime] = None) -> Dict[str, int]:
    """Counts per status, plus pending tasks whose deadline has passed."""
    now = now or utcnow()
    summary = {
        'total': 0,
        'pending': 0,
        'delivered': 0,
        'not_delivered': 0,
        'overdue': 0,
    }
    for task in tasks:
        summary['total'] += 1
        summary[task.status.value] += 1
        if task.is_overdue(now):
            summary['overdue'] += 1
    return summary


def group_by_sector(sectors: Iterable[Sector], tasks: Iterable[Task]) -> List[dict]:
    """One entry per sector, in sector order, each with its tasks in deadline order."""
    by_sector = defaultdict(list)
    for task in tasks:
        by_sector[task.sector_id].append(task)

    return [
        {
            'sector': sector.to_dict(),
            'task_count': len(by_sector[sector.id]),
            'tasks': [t.to_dict() for t in by_sector[sector.id]],
        }
        for sector in sectors
    ]


def build_dashboard(uid, now: Optional[datetime] = None) -> dict:
    sectors = task_service.list_sectors(uid)
    tasks = task_service.list_tasks(uid)
    return {
        'stats': summarize_tasks(tasks, now),
        'sectors': group_by_sector(sectors, tasks),
    }
