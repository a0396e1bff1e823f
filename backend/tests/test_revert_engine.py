"""변경 이력 단위/계획 단위 되돌리기의 복원 정확성, 역순 처리, 충돌, 멱등성을 검증합니다."""

import pytest

from app.models.content_plan import ContentPlan
from app.schemas.content_hub import ContentPlanCreate
from app.services import diff_recorder
from app.services.content_errors import PlanStateError, RevertConflictError, UnauthorizedError
from app.services.content_store import ContentStore
from app.services.plan_engine import EXECUTED, REVERTED, PlanEngine
from app.services.revert_engine import RevertEngine
from app.utils.content_tables import ContentTable


def _execute(db, actor, actions):
    engine = PlanEngine(db)
    plan = engine.save_plan(actor, ContentPlanCreate(title="plan", summary="", actions=actions))
    plan_id = plan.id
    engine.execute_plan(actor, plan_id)
    return plan_id


def test_revert_update_restores_previous_snapshot(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1",
         "data": {"published": True, "tags": ["new"], "title": "Changed"}},
    ])
    change = diff_recorder.list_plan_changes(db, plan_id)[0]
    previous = dict(change.previous_data)

    RevertEngine(db).revert_change(admin, change.id)

    assert ContentStore(db).get(ContentTable.ARTICLES, "a1") == previous


def test_revert_create_removes_record(db, admin):
    plan_id = _execute(db, admin, [
        {"type": "create", "table": "skills", "data": {"name": "Go", "category": "language"}},
    ])
    change = diff_recorder.list_plan_changes(db, plan_id)[0]
    assert ContentStore(db).exists(ContentTable.SKILLS, change.record_id)

    RevertEngine(db).revert_change(admin, change.id)

    assert not ContentStore(db).exists(ContentTable.SKILLS, change.record_id)


def test_revert_delete_restores_record_under_original_id(db, admin, seed_content):
    plan_id = _execute(db, admin, [{"type": "delete", "table": "projects", "record_id": "p1"}])
    change = diff_recorder.list_plan_changes(db, plan_id)[0]
    previous = dict(change.previous_data)
    assert ContentStore(db).get(ContentTable.PROJECTS, "p1") is None

    RevertEngine(db).revert_change(admin, change.id)

    assert ContentStore(db).get(ContentTable.PROJECTS, "p1") == previous


def test_revert_change_is_idempotent(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "Once"}},
        {"type": "update", "table": "articles", "record_id": "a2", "data": {"title": "Twice"}},
    ])
    first = diff_recorder.list_plan_changes(db, plan_id)[0]
    engine = RevertEngine(db)

    reverted = engine.revert_change(admin, first.id)
    assert reverted.reverted is True
    reverted_at = reverted.reverted_at
    before = ContentStore(db).get(ContentTable.ARTICLES, "a1")

    again = engine.revert_change(admin, first.id)
    assert again.reverted is True
    assert again.reverted_at == reverted_at
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1") == before


def test_revert_plan_walks_changes_in_reverse_order(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "B"}},
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "C"}},
    ])
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1")["title"] == "C"

    result = RevertEngine(db).revert_plan(admin, plan_id)

    assert result.outcome == "reverted"
    assert result.status == REVERTED
    assert result.reverted_count == 2
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1")["title"] == "Draft essay"
    plan = db.get(ContentPlan, plan_id)
    assert plan.status == REVERTED
    assert plan.reverted_at is not None
    assert diff_recorder.list_plan_changes(db, plan_id, active_only=True) == []


def test_create_then_update_in_one_plan_reverts_cleanly(db, admin):
    plan_id = _execute(db, admin, [
        {"type": "create", "table": "articles", "data": {"title": "T", "slug": "t", "category": "research"}},
        {"type": "update", "table": "articles", "record_id": "$ref:0", "data": {"published": True}},
    ])
    created_id = diff_recorder.list_plan_changes(db, plan_id)[0].record_id

    result = RevertEngine(db).revert_plan(admin, plan_id)

    assert result.outcome == "reverted"
    assert not ContentStore(db).exists(ContentTable.ARTICLES, created_id)


def test_revert_plan_twice_is_noop(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "x"}},
    ])
    engine = RevertEngine(db)
    engine.revert_plan(admin, plan_id)

    result = engine.revert_plan(admin, plan_id)
    assert result.outcome == "noop"
    assert result.reverted_count == 0
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1")["title"] == "Draft essay"


def test_revert_proposed_plan_is_rejected(db, admin):
    plan = PlanEngine(db).save_plan(admin, ContentPlanCreate(title="p", actions=[]))
    with pytest.raises(PlanStateError):
        RevertEngine(db).revert_plan(admin, plan.id)


def test_update_revert_conflicts_when_record_was_deleted_later(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "projects", "record_id": "p1", "data": {"title": "Renamed"}},
    ])
    change_id = diff_recorder.list_plan_changes(db, plan_id)[0].id
    ContentStore(db).delete(ContentTable.PROJECTS, "p1")
    db.commit()

    with pytest.raises(RevertConflictError):
        RevertEngine(db).revert_change(admin, change_id)
    assert diff_recorder.get_change(db, change_id).reverted is False
    assert db.get(ContentPlan, plan_id).status == EXECUTED


def test_revert_plan_skips_conflicts_and_reports_partial(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "Kept"}},
        {"type": "create", "table": "skills", "data": {"name": "Zig", "category": "language"}},
    ])
    created = diff_recorder.list_plan_changes(db, plan_id)[1]
    created_id, created_change_id = created.record_id, created.id
    ContentStore(db).delete(ContentTable.SKILLS, created_id)
    db.commit()

    result = RevertEngine(db).revert_plan(admin, plan_id)

    assert result.outcome == "partial"
    assert result.status == REVERTED
    assert result.reverted_count == 1
    assert [s.change_id for s in result.skipped] == [created_change_id]
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1")["title"] == "Draft essay"
    plan = db.get(ContentPlan, plan_id)
    assert plan.status == REVERTED
    assert plan.reverted_at is not None
    assert [c.id for c in diff_recorder.list_plan_changes(db, plan_id, active_only=True)] == [created_change_id]

    engine = RevertEngine(db)
    assert engine.revert_plan(admin, plan_id).outcome == "noop"
    with pytest.raises(RevertConflictError):
        engine.revert_change(admin, created_change_id)
    assert diff_recorder.get_change(db, created_change_id).reverted is False


def test_skipped_change_can_be_retried_after_conflict_is_resolved(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "projects", "record_id": "p1", "data": {"title": "Renamed"}},
    ])
    change_id = diff_recorder.list_plan_changes(db, plan_id)[0].id
    store = ContentStore(db)
    removed = store.get(ContentTable.PROJECTS, "p1")
    store.delete(ContentTable.PROJECTS, "p1")
    db.commit()

    engine = RevertEngine(db)
    result = engine.revert_plan(admin, plan_id)
    assert (result.outcome, result.status, result.reverted_count) == ("partial", REVERTED, 0)

    store.insert(ContentTable.PROJECTS, removed, restore=True)
    db.commit()
    assert engine.revert_change(admin, change_id).reverted is True
    assert store.get(ContentTable.PROJECTS, "p1")["title"] == "Halftone"
    assert db.get(ContentPlan, plan_id).status == REVERTED


def test_plan_becomes_reverted_after_last_individual_revert(db, admin, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "1"}},
        {"type": "update", "table": "articles", "record_id": "a2", "data": {"title": "2"}},
    ])
    first, second = [c.id for c in diff_recorder.list_plan_changes(db, plan_id)]
    engine = RevertEngine(db)

    engine.revert_change(admin, second)
    assert db.get(ContentPlan, plan_id).status == EXECUTED

    engine.revert_change(admin, first)
    assert db.get(ContentPlan, plan_id).status == REVERTED


def test_non_admin_cannot_revert(db, admin, editor, seed_content):
    plan_id = _execute(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "x"}},
    ])
    change_id = diff_recorder.list_plan_changes(db, plan_id)[0].id
    engine = RevertEngine(db)

    with pytest.raises(UnauthorizedError):
        engine.revert_change(editor, change_id)
    with pytest.raises(UnauthorizedError):
        engine.revert_plan(editor, plan_id)
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1")["title"] == "x"


def test_revert_delete_uses_new_id_when_original_id_is_taken(db, admin, seed_content):
    plan_id = _execute(db, admin, [{"type": "delete", "table": "projects", "record_id": "p1"}])
    change = diff_recorder.list_plan_changes(db, plan_id)[0]
    change_id, previous = change.id, dict(change.previous_data)
    store = ContentStore(db)
    store.insert(ContentTable.PROJECTS, {"id": "p1", "title": "Squatter", "slug": "squatter"}, restore=True)
    db.commit()

    RevertEngine(db).revert_change(admin, change_id)

    assert store.get(ContentTable.PROJECTS, "p1")["title"] == "Squatter"
    restored = [r for r in store.list_recent(ContentTable.PROJECTS) if r["slug"] == "halftone"]
    assert len(restored) == 1
    assert restored[0]["id"] != "p1"
    assert {k: v for k, v in restored[0].items() if k != "id"} == {
        k: v for k, v in previous.items() if k != "id"
    }
    assert diff_recorder.get_change(db, change_id).reverted is True
