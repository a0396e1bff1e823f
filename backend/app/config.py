"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./content_hub.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # AI completion service (OpenAI 호환 API)
    AI_API_KEY: str = "your_ai_api_key"
    AI_BASE_URL: str = "https://ai.gateway.example.com/v1"
    AI_CONTENT_HUB_MODEL: str = "google/gemini-3-flash-preview"
    # 기본 모델이 존재하지 않는다고 응답할 때 순서대로 시도한다.
    AI_FALLBACK_MODELS: List[str] = []
    AI_TEMPERATURE: float = 0.4
    AI_MAX_TOKENS: int = 4096
    AI_FEATURES_ENABLED: bool = True

    # [content-hub] 스냅샷/디버그 설정
    CONTENT_HUB_DEBUG_MODE: bool = False
    CONTENT_HUB_RECENT_LIMIT: int = 5
    CONTENT_HUB_STALE_DAYS: int = 90
    CONTENT_HUB_RECENT_CHANGES_LIMIT: int = 20

    def ai_model_candidates(self) -> List[str]:
        primary = str(self.AI_CONTENT_HUB_MODEL or "").strip()
        candidates = [primary] if primary else []
        for name in self.AI_FALLBACK_MODELS or []:
            name = str(name or "").strip()
            if name and name not in candidates:
                candidates.append(name)
        return candidates

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
