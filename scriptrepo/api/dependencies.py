"""
API 의존성 모듈

애플리케이션 수명 동안 공유되는 서비스 인스턴스를 라우터에 주입합니다.
"""

from fastapi import HTTPException, Request, status

from ..operation.announcement import AnnouncementService
from ..scripts.file_entry_service import FileEntryService


def get_file_entry_service(request: Request) -> FileEntryService:
    """파일 엔트리 서비스 의존성 함수"""
    service = getattr(request.app.state, "file_entry_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="파일 엔트리 서비스가 초기화되지 않았습니다"
        )
    return service


def get_announcement_service(request: Request) -> AnnouncementService:
    """공지사항 서비스 의존성 함수"""
    service = getattr(request.app.state, "announcement_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="공지사항 서비스가 초기화되지 않았습니다"
        )
    return service
