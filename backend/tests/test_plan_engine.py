"""콘텐츠 계획 저장/실행 서비스의 순차 실행, 부분 실패, 중단 처리를 검증합니다."""

import pytest

from app.models.article import Article
from app.models.content_plan import ContentChange, ContentPlan
from app.schemas.content_hub import ContentPlanCreate, ContentPlanUpdate
from app.services import diff_recorder
from app.services.content_errors import (
    HistoryIntegrityError,
    NotFoundError,
    PlanStateError,
    UnauthorizedError,
    ValidationError,
)
from app.services.content_store import ContentStore
from app.services.plan_engine import EXECUTED, PROPOSED, PlanEngine
from app.utils.content_tables import ContentTable
from app.utils.helpers import utcnow


def _save(db, actor, actions, title="plan"):
    return PlanEngine(db).save_plan(actor, ContentPlanCreate(title=title, summary="s", actions=actions))


def test_save_plan_is_proposed_and_does_not_touch_content(db, admin, seed_content):
    plan = _save(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"published": True}},
    ])
    assert plan.status == PROPOSED
    assert plan.created_by == admin.user_id
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1")["published"] is False
    assert db.query(ContentChange).count() == 0


def test_non_admin_cannot_save_or_execute(db, admin, editor, seed_content):
    with pytest.raises(UnauthorizedError):
        _save(db, editor, [{"type": "delete", "table": "articles", "record_id": "a2"}])

    plan = _save(db, admin, [{"type": "delete", "table": "articles", "record_id": "a2"}])
    with pytest.raises(UnauthorizedError):
        PlanEngine(db).execute_plan(editor, plan.id)
    assert db.get(Article, "a2") is not None


def test_execute_applies_actions_in_order_and_records_changes(db, admin, seed_content):
    plan = _save(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"published": True}},
        {"type": "create", "table": "skills", "data": {"name": "Rust", "category": "language"}},
        {"type": "delete", "table": "articles", "record_id": "a2"},
    ])
    result = PlanEngine(db).execute_plan(admin, plan.id)

    assert result.outcome == "applied"
    assert result.status == EXECUTED
    assert (result.succeeded_count, result.total_count) == (3, 3)
    assert result.failed_actions == []
    assert len(result.change_ids) == 3

    changes = diff_recorder.list_plan_changes(db, plan.id)
    assert [c.action_type for c in changes] == ["update", "create", "delete"]
    assert [c.sequence for c in changes] == [0, 1, 2]
    assert changes[0].previous_data["published"] is False
    assert changes[0].new_data["published"] is True
    assert changes[1].previous_data is None
    assert changes[2].new_data is None

    stored = db.get(ContentPlan, plan.id)
    assert stored.status == EXECUTED
    assert stored.executed_at is not None


def test_partial_failure_is_isolated(db, admin, seed_content):
    plan = _save(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "First"}},
        {"type": "update", "table": "articles", "record_id": "missing", "data": {"title": "x"}},
        {"type": "update", "table": "articles", "record_id": "a2", "data": {"title": "Third"}},
    ])
    result = PlanEngine(db).execute_plan(admin, plan.id)

    assert result.outcome == "partial"
    assert result.status == EXECUTED
    assert (result.succeeded_count, result.total_count) == (2, 3)
    assert result.message == "3개 중 2개 action을 적용했습니다."
    assert len(result.failed_actions) == 1
    failure = result.failed_actions[0]
    assert failure.index == 1
    assert failure.error == "NotFoundError"

    store = ContentStore(db)
    assert store.get(ContentTable.ARTICLES, "a1")["title"] == "First"
    assert store.get(ContentTable.ARTICLES, "a2")["title"] == "Third"
    assert [c.sequence for c in diff_recorder.list_plan_changes(db, plan.id)] == [0, 2]


def test_failed_create_reports_missing_fields(db, admin):
    plan = _save(db, admin, [{"type": "create", "table": "articles", "data": {"title": "No slug"}}])
    result = PlanEngine(db).execute_plan(admin, plan.id)

    assert result.succeeded_count == 0
    assert result.failed_actions[0].error == "ValidationError"
    assert result.failed_actions[0].missing_fields == ["slug", "category"]
    assert db.query(Article).count() == 0


def test_forbidden_table_action_fails_alone(db, admin, seed_content):
    plan = _save(db, admin, [
        {"type": "update", "table": "users", "record_id": "1", "data": {"role": "admin"}},
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"published": True}},
    ])
    result = PlanEngine(db).execute_plan(admin, plan.id)

    assert result.failed_actions[0].error == "ForbiddenTableError"
    assert result.succeeded_count == 1


def test_empty_plan_is_rejected(db, admin):
    plan = _save(db, admin, [])
    with pytest.raises(ValidationError):
        PlanEngine(db).execute_plan(admin, plan.id)
    assert db.get(ContentPlan, plan.id).status == PROPOSED


def test_plan_cannot_execute_twice(db, admin, seed_content):
    plan = _save(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"published": True}},
    ])
    engine = PlanEngine(db)
    engine.execute_plan(admin, plan.id)
    with pytest.raises(PlanStateError):
        engine.execute_plan(admin, plan.id)
    assert db.query(ContentChange).count() == 1


def test_unknown_plan_raises_not_found(db, admin):
    with pytest.raises(NotFoundError):
        PlanEngine(db).execute_plan(admin, "nope")


def test_ref_placeholder_points_to_created_record(db, admin):
    plan = _save(db, admin, [
        {"type": "create", "table": "articles", "data": {"title": "T", "slug": "t", "category": "research"}},
        {"type": "update", "table": "articles", "record_id": "$ref:0", "data": {"published": True}},
    ])
    result = PlanEngine(db).execute_plan(admin, plan.id)

    assert result.outcome == "applied"
    changes = diff_recorder.list_plan_changes(db, plan.id)
    assert changes[1].record_id == changes[0].record_id
    assert ContentStore(db).get(ContentTable.ARTICLES, changes[0].record_id)["published"] is True


def test_forward_ref_fails_that_action(db, admin):
    plan = _save(db, admin, [
        {"type": "update", "table": "articles", "record_id": "$ref:1", "data": {"published": True}},
        {"type": "create", "table": "articles", "data": {"title": "T", "slug": "t", "category": "research"}},
    ])
    result = PlanEngine(db).execute_plan(admin, plan.id)

    assert result.outcome == "partial"
    assert result.failed_actions[0].index == 0
    assert result.failed_actions[0].error == "ValidationError"


def test_history_failure_aborts_and_leaves_orphaned_plan(db, admin, seed_content, monkeypatch):
    original = diff_recorder.record_change

    def _flaky_record(db_, *, plan_id, sequence, result):
        if sequence == 1:
            raise HistoryIntegrityError("history store offline")
        return original(db_, plan_id=plan_id, sequence=sequence, result=result)

    monkeypatch.setattr(diff_recorder, "record_change", _flaky_record)
    plan = _save(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "Applied"}},
        {"type": "update", "table": "articles", "record_id": "a2", "data": {"title": "Lost"}},
        {"type": "update", "table": "projects", "record_id": "p1", "data": {"title": "Never"}},
    ])
    engine = PlanEngine(db)
    with pytest.raises(HistoryIntegrityError):
        engine.execute_plan(admin, plan.id)

    store = ContentStore(db)
    assert store.get(ContentTable.ARTICLES, "a1")["title"] == "Applied"
    assert store.get(ContentTable.ARTICLES, "a2")["title"] == "Old essay"
    assert store.get(ContentTable.PROJECTS, "p1")["title"] == "Halftone"
    assert db.get(ContentPlan, plan.id).status == PROPOSED

    orphaned = engine.find_orphaned_plans(admin)
    assert [p.id for p in orphaned] == [plan.id]

    monkeypatch.setattr(diff_recorder, "record_change", original)
    with pytest.raises(PlanStateError):
        engine.execute_plan(admin, plan.id)


def test_update_and_discard_only_while_proposed(db, admin, seed_content):
    engine = PlanEngine(db)
    plan = _save(db, admin, [{"type": "delete", "table": "articles", "record_id": "a2"}])

    updated = engine.update_plan(admin, plan.id, ContentPlanUpdate(
        title="renamed",
        actions=[{"type": "update", "table": "articles", "record_id": "a2", "data": {"published": False}}],
    ))
    assert updated.title == "renamed"
    assert updated.actions[0]["type"] == "update"

    engine.execute_plan(admin, plan.id)
    with pytest.raises(PlanStateError):
        engine.update_plan(admin, plan.id, ContentPlanUpdate(title="again"))
    with pytest.raises(PlanStateError):
        engine.discard_plan(admin, plan.id)

    other_id = _save(db, admin, [{"type": "delete", "table": "articles", "record_id": "a1"}]).id
    engine.discard_plan(admin, other_id)
    assert db.get(ContentPlan, other_id) is None
    assert db.get(Article, "a1") is not None


def test_list_plans_filters_by_status(db, admin, seed_content):
    engine = PlanEngine(db)
    done = _save(db, admin, [{"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "x"}}])
    engine.execute_plan(admin, done.id)
    pending = _save(db, admin, [{"type": "delete", "table": "articles", "record_id": "a2"}])

    assert [p.id for p in engine.list_plans(admin, status="proposed")] == [pending.id]
    assert [p.id for p in engine.list_plans(admin, status="executed")] == [done.id]
    assert {p.id for p in engine.list_plans(admin, status="proposed,executed")} == {done.id, pending.id}


def test_concurrent_execute_loses_claim_and_applies_nothing(db, admin, seed_content):
    plan = _save(db, admin, [
        {"type": "update", "table": "articles", "record_id": "a1", "data": {"title": "Twice?"}},
    ])
    plan_id = plan.id
    # 다른 요청이 먼저 실행권을 가져간 상태
    db.query(ContentPlan).filter(ContentPlan.id == plan_id).update(
        {ContentPlan.executed_at: utcnow()}, synchronize_session=False,
    )
    db.commit()

    engine = PlanEngine(db)
    with pytest.raises(PlanStateError):
        engine.execute_plan(admin, plan_id)
    assert ContentStore(db).get(ContentTable.ARTICLES, "a1")["title"] == "Draft essay"
    assert db.query(ContentChange).count() == 0
    assert [p.id for p in engine.find_orphaned_plans(admin)] == [plan_id]
    with pytest.raises(PlanStateError):
        engine.update_plan(admin, plan_id, ContentPlanUpdate(title="edited"))


def test_claim_is_granted_once(db, admin):
    plan_id = _save(db, admin, [{"type": "delete", "table": "skills", "record_id": "s1"}]).id
    engine = PlanEngine(db)

    assert engine._claim(plan_id) is True
    assert engine._claim(plan_id) is False
