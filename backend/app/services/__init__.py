"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    auth_service,
    content_store,
    action_executor,
    diff_recorder,
    activity_service,
    plan_engine,
    revert_engine,
    snapshot_service,
    plan_proposer,
    conversation_service,
)
