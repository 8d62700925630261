# backend/app/family/stats.py

"""
家族単位のペット / タスク集計。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .schemas import FamilyStats
from .store import DocumentStore


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FamilyStatsAggregator:
    """
    ペットとタスクを familyCode でストア側から絞り込み、件数を集計する。

    pet ID リストでのクライアント側絞り込みは行わない（別家族のタスク混入を防ぐため）。
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def stats(self, family_code: str, now: Optional[datetime] = None) -> FamilyStats:
        now = _as_utc(now) if now is not None else datetime.now(timezone.utc)

        pets = self._store.query_pets_by_family(family_code)
        tasks = self._store.query_tasks_by_family(family_code)

        completed = sum(1 for t in tasks if t.done)
        # 期限なしのタスクは期限切れにならない
        overdue = sum(
            1
            for t in tasks
            if not t.done and t.due_date is not None and _as_utc(t.due_date) < now
        )

        return FamilyStats(
            total_pets=len(pets),
            total_tasks=len(tasks),
            completed_tasks=completed,
            pending_tasks=len(tasks) - completed,
            overdue_tasks=overdue,
        )
