"""
공지사항 엔드포인트 모듈

관리자(A)와 슈퍼 유저(S)만 접근할 수 있는 공지사항 조회/저장 엔드포인트입니다.
"""

from fastapi import APIRouter, Depends, Form

from ...models.base import User
from ...operation.announcement import AnnouncementService
from ..auth import require_operator
from ..dependencies import get_announcement_service
from ..models import AnnouncementResponse

# 공지사항 라우터
announcement_router = APIRouter(prefix="/operation/announcement", tags=["Operation"])


@announcement_router.get("", response_model=AnnouncementResponse)
async def get_announcement(
    user: User = Depends(require_operator),
    service: AnnouncementService = Depends(get_announcement_service)
):
    """공지사항 조회"""
    return AnnouncementResponse(content=service.get_announcement())


@announcement_router.post("/save", response_model=AnnouncementResponse)
async def save_announcement(
    content: str = Form("", description="공지사항 내용"),
    user: User = Depends(require_operator),
    service: AnnouncementService = Depends(get_announcement_service)
):
    """
    공지사항 저장

    Args:
        content: 공지사항 내용
        user: 현재 사용자 (A 또는 S 권한)
        service: 공지사항 서비스

    Returns:
        저장 결과와 저장 후 공지사항 내용
    """
    success = service.save_announcement(content)
    return AnnouncementResponse(content=service.get_announcement(), success=success)
