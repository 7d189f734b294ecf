"""
FastAPI 메인 애플리케이션

사용자 스크립트 저장소 서비스의 REST API를 제공합니다.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.settings import Settings, get_settings
from ..exceptions import (
    AuthenticationException,
    FileEntryException,
    HarParseException,
    PreconditionException,
    ScriptHandlerNotFoundException,
    ScriptRepositorySystemException,
    TemplateRenderException,
)
from ..operation.announcement import AnnouncementService
from ..scripts.file_entry_service import FileEntryService
from ..utils.logging import setup_logging
from .auth import AuthManager, get_auth_manager
from .endpoints.announcement import announcement_router
from .endpoints.scripts import scripts_router
from .models import AuthTokenRequest, AuthTokenResponse, ErrorResponse, HealthCheckResponse

# 시스템 예외별 HTTP 상태 코드
EXCEPTION_STATUS_CODES = {
    PreconditionException: status.HTTP_400_BAD_REQUEST,
    HarParseException: status.HTTP_400_BAD_REQUEST,
    ScriptHandlerNotFoundException: status.HTTP_404_NOT_FOUND,
    AuthenticationException: status.HTTP_401_UNAUTHORIZED,
    TemplateRenderException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    FileEntryException: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(exc: ScriptRepositorySystemException) -> int:
    """시스템 예외에 대응하는 HTTP 상태 코드"""
    for exc_type, status_code in EXCEPTION_STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    FastAPI 애플리케이션 생성

    Args:
        settings: 시스템 설정 (None이면 기본 설정 사용)

    Returns:
        FastAPI 애플리케이션
    """
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """앱 생명주기 관리"""
        logger = setup_logging(settings)
        logger.info("API 서버 시작")

        app.state.file_entry_service = FileEntryService(settings)
        app.state.announcement_service = AnnouncementService(settings)
        app.state.started_at = datetime.now()
        logger.info("API 서버 초기화 완료")

        try:
            yield
        finally:
            app.state.file_entry_service.shutdown()
            logger.info("API 서버 종료")

    app = FastAPI(
        title="스크립트 저장소 API",
        description="사용자별 테스트 스크립트 저장소 REST API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # 라우트 의존성에서 앱 생성 시점의 설정을 사용
    app.dependency_overrides[get_settings] = lambda: settings

    # CORS 미들웨어
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # GZip 압축 미들웨어
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.include_router(scripts_router)
    app.include_router(announcement_router)

    @app.get("/", tags=["Root"])
    async def root():
        """루트 엔드포인트"""
        return {
            "message": "스크립트 저장소 API",
            "version": __version__,
            "status": "running",
            "timestamp": datetime.now().isoformat(),
            "docs_url": "/docs"
        }

    @app.get("/health", response_model=HealthCheckResponse, tags=["Health"])
    async def health_check(request: Request):
        """
        헬스 체크

        Returns:
            서비스 상태 정보
        """
        components = {}

        service = getattr(request.app.state, "file_entry_service", None)
        if service is not None and service.repository.root_dir.is_dir():
            components["repository_root"] = "operational"
        else:
            components["repository_root"] = "unavailable"

        if getattr(request.app.state, "announcement_service", None) is not None:
            components["announcement"] = "operational"
        else:
            components["announcement"] = "unavailable"

        overall_status = "healthy" if all(
            value == "operational" for value in components.values()
        ) else "degraded"

        return HealthCheckResponse(
            status=overall_status,
            timestamp=datetime.now(),
            components=components,
            version=__version__
        )

    @app.post("/auth/token", response_model=AuthTokenResponse, tags=["Authentication"])
    async def create_access_token(
        request: AuthTokenRequest,
        auth_manager: AuthManager = Depends(get_auth_manager)
    ):
        """
        액세스 토큰 생성

        Args:
            request: 토큰 요청 정보
            auth_manager: 인증 관리자

        Returns:
            JWT 액세스 토큰
        """
        user = auth_manager.resolve_user(request.user_id, request.user_name)
        access_token = auth_manager.create_access_token(user)

        return AuthTokenResponse(
            access_token=access_token,
            token_type="bearer",
            expires_in=settings.jwt_expires_hours * 3600,
            user_id=user.user_id,
            role=user.role.value
        )

    @app.exception_handler(ScriptRepositorySystemException)
    async def system_exception_handler(request: Request, exc: ScriptRepositorySystemException):
        """시스템 예외 핸들러"""
        return JSONResponse(
            status_code=status_code_for(exc),
            content=ErrorResponse(
                error=exc.message,
                code=exc.error_code
            ).model_dump(mode="json")
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """HTTP 예외 핸들러"""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                code=str(exc.status_code)
            ).model_dump(mode="json"),
            headers=exc.headers
        )

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "scriptrepo.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level="info"
    )
