"""
스크립트 엔드포인트 모듈

사용자 스크립트 저장소의 조회, 저장, 삭제, 스크립트 생성과 HAR 변환을
HTTP 엔드포인트로 노출합니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from ...models.base import User
from ...scripts.file_entry_service import FileEntryService
from ...utils.logging import get_logger
from ..auth import get_current_user
from ..dependencies import get_file_entry_service
from ..models import (
    FileEntryDeleteRequest,
    FileEntryResponse,
    FileEntrySaveRequest,
    FolderCreateRequest,
    HarConvertRequest,
    HarConvertResponse,
    NewScriptRequest,
    QuickTestRequest,
    QuickTestResponse,
    SaveResultResponse,
    ScriptHandlerResponse,
    SyntaxCheckResponse,
)

logger = get_logger(__name__)

# 스크립트 라우터
scripts_router = APIRouter(prefix="/script/api", tags=["Script"])


@scripts_router.post("/prepare", status_code=status.HTTP_202_ACCEPTED)
async def prepare_repository(
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """사용자 저장소 생성을 백그라운드로 요청"""
    service.prepare(user)
    return {"accepted": True, "user_id": user.user_id}


@scripts_router.get("/entries", response_model=List[FileEntryResponse])
async def list_entries(
    path: Optional[str] = Query(None, description="디렉토리 경로 (없으면 전체 목록)"),
    revision: Optional[int] = Query(None, description="리비전 (없거나 -1 이면 HEAD)"),
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """
    파일 엔트리 목록 조회

    Args:
        path: 디렉토리 경로
        revision: 리비전
        user: 현재 사용자
        service: 파일 엔트리 서비스

    Returns:
        파일 엔트리 목록 (내용 제외)
    """
    if path is None:
        entries = await service.get_all(user)
    else:
        entries = await service.get_all(user, path, revision)
    return [FileEntryResponse.from_entry(entry) for entry in entries]


@scripts_router.get("/entry", response_model=FileEntryResponse)
async def get_entry(
    path: str = Query(..., min_length=1, description="파일 경로"),
    revision: Optional[int] = Query(None, description="리비전 (없거나 -1 이면 HEAD)"),
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """파일 엔트리 단건 조회 (내용 포함)"""
    entry = await service.get_one(user, path, revision)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"파일을 찾을 수 없습니다: {path}"
        )
    return FileEntryResponse.from_entry(entry)


@scripts_router.post("/entry", response_model=SaveResultResponse)
async def save_entry(
    request: FileEntrySaveRequest,
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """파일 엔트리 저장"""
    revision = await service.save(user, request.to_entry())
    logger.info(f"파일 저장 요청 처리: {user.user_id}:{request.path}")
    return SaveResultResponse(success=True, revision=revision)


@scripts_router.post("/delete", response_model=SaveResultResponse)
async def delete_entries(
    request: FileEntryDeleteRequest,
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """파일 엔트리 삭제 (여러 이름을 하나의 커밋으로)"""
    revision = await service.delete(user, request.base_path, request.file_names)
    return SaveResultResponse(success=revision is not None, revision=revision)


@scripts_router.post("/folder", response_model=SaveResultResponse)
async def add_folder(
    request: FolderCreateRequest,
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """폴더 추가"""
    revision = await service.add_folder(user, request.path, request.folder_name, request.comment)
    return SaveResultResponse(success=True, revision=revision)


@scripts_router.post("/new", response_model=Optional[FileEntryResponse])
async def create_new_script(
    request: NewScriptRequest,
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """
    템플릿으로 새 스크립트 생성

    단일 파일 스크립트는 저장되지 않은 엔트리를 반환하고,
    프로젝트 스크립트는 구성을 저장한 뒤 null 을 반환합니다.
    """
    handler = service.get_script_handler(request.script_type)
    entry = await service.prepare_new_entry(
        user,
        request.path,
        request.file_name,
        request.name or request.file_name,
        request.url,
        handler,
        request.include_lib_and_resource,
        request.options
    )
    if entry is None:
        return None
    return FileEntryResponse.from_entry(entry)


@scripts_router.post("/quick_test", response_model=QuickTestResponse)
async def create_quick_test(
    request: QuickTestRequest,
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """URL 로부터 퀵 테스트 스크립트 생성"""
    handler = service.get_script_handler(request.script_type)
    path = await service.prepare_new_entry_for_quick_test(user, request.url, handler)
    return QuickTestResponse(path=path, script_type=handler.key)


@scripts_router.post("/har/upload")
async def upload_har(
    file: UploadFile = File(..., description="HAR 파일"),
    remove_static_resource: bool = Form(True, description="정적 리소스 제거 여부"),
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """업로드된 HAR 파일을 정리한 JSON 텍스트로 반환"""
    content = service.load_har(file.file, remove_static_resource)
    logger.info(f"HAR 업로드 처리: {user.user_id} ({file.filename})")
    return {"har": content}


@scripts_router.post("/har/convert", response_model=HarConvertResponse)
async def convert_har(
    request: HarConvertRequest,
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """HAR 을 Groovy / Jython 스크립트로 변환"""
    scripts = service.convert_to_script(request.har, request.remove_static_resource)
    return HarConvertResponse(**scripts)


@scripts_router.get("/handlers", response_model=List[ScriptHandlerResponse])
async def list_handlers(
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """사용 가능한 스크립트 핸들러 목록"""
    return [
        ScriptHandlerResponse(
            key=handler.key,
            title=handler.title,
            extension=handler.extension,
            codemirror_key=handler.codemirror_key,
            is_project_handler=handler.is_project_handler
        )
        for handler in service.handler_factory.handlers
    ]


@scripts_router.post("/syntax", response_model=SyntaxCheckResponse)
async def check_syntax(
    script_type: str = Form(..., description="스크립트 핸들러 키"),
    script: str = Form("", description="검사할 스크립트"),
    user: User = Depends(get_current_user),
    service: FileEntryService = Depends(get_file_entry_service)
):
    """스크립트 문법 검사"""
    error = service.get_script_handler(script_type).check_syntax_errors(script)
    return SyntaxCheckResponse(valid=error is None, error=error)
