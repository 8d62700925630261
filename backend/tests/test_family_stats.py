# backend/tests/test_family_stats.py

from datetime import datetime, timedelta, timezone

from app.family.stats import FamilyStatsAggregator
from app.family.store import InMemoryDocumentStore

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.add_pet("p1", familyCode="F1", name="Rex", species="cachorro")
    store.add_pet("p2", familyCode="F1", name="Mia", species="gato")
    store.add_pet("p3", familyCode="F2", name="Bob", species="peixe")

    store.add_task("t1", familyCode="F1", petId="p1", title="Banho", done=True)
    store.add_task(
        "t2", familyCode="F1", petId="p1", title="Passeio", done=False,
        dueDate=NOW + timedelta(days=1),
    )
    store.add_task(
        "t3", familyCode="F1", petId="p2", title="Vermífugo", done=False,
        dueDate=NOW - timedelta(days=1),
    )
    # 別家族のタスク（pet ID が同じでも混ざらないこと）
    store.add_task(
        "t4", familyCode="F2", petId="p1", title="Outro", done=False,
        dueDate=NOW - timedelta(days=3),
    )
    return store


def test_stats_counts_family_records() -> None:
    stats = FamilyStatsAggregator(_make_store()).stats("F1", now=NOW)

    assert stats.total_pets == 2
    assert stats.total_tasks == 3
    assert stats.completed_tasks == 1
    assert stats.pending_tasks == 2
    assert stats.overdue_tasks == 1


def test_tasks_without_due_date_are_never_overdue() -> None:
    store = InMemoryDocumentStore()
    store.add_task("t1", familyCode="F1", title="Sem prazo", done=False)

    stats = FamilyStatsAggregator(store).stats("F1", now=NOW)

    assert stats.pending_tasks == 1
    assert stats.overdue_tasks == 0


def test_done_tasks_with_past_due_date_are_not_overdue() -> None:
    store = InMemoryDocumentStore()
    store.add_task("t1", familyCode="F1", done=True, dueDate=NOW - timedelta(days=10))

    stats = FamilyStatsAggregator(store).stats("F1", now=NOW)

    assert stats.overdue_tasks == 0


def test_due_date_equal_to_now_is_not_overdue() -> None:
    store = InMemoryDocumentStore()
    store.add_task("t1", familyCode="F1", done=False, dueDate=NOW)

    assert FamilyStatsAggregator(store).stats("F1", now=NOW).overdue_tasks == 0


def test_due_date_string_and_naive_datetimes_are_treated_as_utc() -> None:
    store = InMemoryDocumentStore()
    store.add_task("t1", familyCode="F1", done=False, dueDate="2025-05-31T00:00:00Z")
    store.add_task("t2", familyCode="F1", done=False, dueDate=datetime(2025, 5, 30))
    store.add_task("t3", familyCode="F1", done=False, dueDate="not-a-date")

    stats = FamilyStatsAggregator(store).stats("F1", now=datetime(2025, 6, 1))

    assert stats.total_tasks == 3
    assert stats.overdue_tasks == 2


def test_empty_family_has_zero_counts() -> None:
    stats = FamilyStatsAggregator(InMemoryDocumentStore()).stats("F1", now=NOW)

    assert stats.model_dump() == {
        "total_pets": 0,
        "total_tasks": 0,
        "completed_tasks": 0,
        "pending_tasks": 0,
        "overdue_tasks": 0,
    }
