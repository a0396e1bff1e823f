"""Content Hub 도메인 예외 정의입니다. 라우터에서 HTTPException으로 변환됩니다."""

from typing import Iterable, Optional


class ContentHubError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class UnauthorizedError(ContentHubError):
    status_code = 403

    def __init__(self, detail: str = "관리자만 콘텐츠 계획을 다룰 수 있습니다."):
        super().__init__(detail)


class ForbiddenTableError(ContentHubError):
    status_code = 400

    def __init__(self, table: str):
        super().__init__(f"허용되지 않은 테이블입니다: {table}")
        self.table = table


class ValidationError(ContentHubError):
    status_code = 422

    def __init__(self, detail: str, missing_fields: Optional[Iterable[str]] = None):
        super().__init__(detail)
        self.missing_fields = list(missing_fields or [])


class NotFoundError(ContentHubError):
    status_code = 404


class PlanStateError(ContentHubError):
    status_code = 409


class RevertConflictError(ContentHubError):
    status_code = 409


class HistoryIntegrityError(ContentHubError):
    """작업은 적용됐지만 변경 이력을 남기지 못한 경우. 되돌릴 수 없으므로 치명적이다."""

    status_code = 500


class UpstreamServiceError(ContentHubError):
    RATE_LIMITED = "rate_limited"
    PAYMENT_REQUIRED = "payment_required"
    UNAVAILABLE = "unavailable"

    _STATUS = {
        RATE_LIMITED: 429,
        PAYMENT_REQUIRED: 402,
        UNAVAILABLE: 503,
    }

    def __init__(self, reason: str, detail: str):
        super().__init__(detail)
        self.reason = reason
        self.status_code = self._STATUS.get(reason, 503)
