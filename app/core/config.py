"""
환경 설정 모듈
PostgreSQL, Redis, Judge0 등의 설정을 관리합니다.
"""
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 환경 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # 알 수 없는 환경 변수는 무시
    )

    # 앱 기본 설정
    APP_NAME: str = "Contest Judge Worker"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # FastAPI 설정
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # PostgreSQL 설정
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "contest_judge"
    POSTGRES_POOL_SIZE: int = 10
    POSTGRES_MAX_OVERFLOW: int = 20

    @property
    def POSTGRES_URL(self) -> str:
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Redis 설정 (채점 큐 / 작업 상태)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Judge0 설정 (코드 실행)
    JUDGE0_API_URL: str = "http://localhost:2358"  # 또는 "https://judge0-ce.p.rapidapi.com" (RapidAPI 사용 시)
    JUDGE0_API_KEY: Optional[str] = None
    JUDGE0_USE_RAPIDAPI: bool = False  # RapidAPI 사용 여부
    JUDGE0_RAPIDAPI_HOST: str = "judge0-ce.p.rapidapi.com"  # RapidAPI Host
    JUDGE0_AUTH_TOKEN: Optional[str] = None  # 자체 호스팅 Judge0의 X-Auth-Token
    JUDGE0_REQUEST_TIMEOUT: float = 30.0  # HTTP 요청 타임아웃 (초)

    # Judge0 폴링 설정
    JUDGE0_POLL_MAX_ATTEMPTS: int = 15  # 최대 폴링 횟수
    JUDGE0_POLL_INTERVAL_MS: int = 1000  # 폴링 간격 (밀리초)
    JUDGE0_POLL_BACKOFF_STRATEGY: str = "fixed"  # 백오프 전략 (fixed, linear, exponential)
    JUDGE0_POLL_MAX_DELAY_MS: int = 5000  # 최대 대기 시간 (밀리초)

    # 큐 시스템 설정
    USE_REDIS_QUEUE: bool = True  # True: Redis 큐, False: 메모리 큐
    JUDGE_JOB_TTL_SECONDS: int = 3600  # 채점 작업 상태/결과 보관 시간
    JUDGE_JOB_MAX_ENTRIES: int = 1000  # 메모리 큐에서 보관하는 최대 결과 수
    RUN_EMBEDDED_WORKER: bool = False  # True: API 프로세스 안에서 Worker 실행 (메모리 큐 사용 시 필수)

    # 대회 설정
    ENFORCE_CONTEST_WINDOW: bool = True  # 대회 시간 외 제출 거부

    # 표절 검사 설정
    PLAGIARISM_DEFAULT_THRESHOLD: float = 0.7

    # 관리자 API 키 (X-Admin-Key 헤더)
    ADMIN_API_KEY: Optional[str] = None


@lru_cache()
def get_settings() -> Settings:
    """싱글톤 설정 객체 반환"""
    return Settings()


settings = get_settings()
