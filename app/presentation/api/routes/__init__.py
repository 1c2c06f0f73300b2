"""
API 라우터 모듈
"""
from app.presentation.api.routes.submissions import router as submissions_router
from app.presentation.api.routes.contests import router as contests_router
from app.presentation.api.routes.plagiarism import router as plagiarism_router
from app.presentation.api.routes.health import router as health_router

__all__ = ["submissions_router", "contests_router", "plagiarism_router", "health_router"]
