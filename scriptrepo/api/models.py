"""
API 요청/응답 모델 모듈

FastAPI용 Pydantic 모델들을 정의합니다.
"""

import re
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.base import FileEntry
from ..models.enums import FileType


class FileEntryResponse(BaseModel):
    """파일 엔트리 응답 모델"""

    path: str = Field(..., description="저장소 내 경로")
    file_name: str = Field(..., description="파일 이름")
    file_type: FileType = Field(..., description="파일 타입")
    content: Optional[str] = Field(None, description="텍스트 내용")
    encoding: Optional[str] = Field(None, description="내용 인코딩")
    description: Optional[str] = Field(None, description="설명 (커밋 메시지)")
    properties: Dict[str, str] = Field(default_factory=dict, description="부가 속성")
    revision: Optional[int] = Field(None, description="조회한 리비전")
    last_revision: Optional[int] = Field(None, description="마지막으로 변경된 리비전")
    file_size: int = Field(0, description="파일 크기 (바이트)")
    last_modified: Optional[datetime] = Field(None, description="마지막 변경 시간")

    @classmethod
    def from_entry(cls, entry: FileEntry) -> "FileEntryResponse":
        """파일 엔트리로부터 응답 생성"""
        return cls(
            file_name=entry.file_name,
            **entry.model_dump(exclude={"content_bytes"})
        )


class FileEntrySaveRequest(BaseModel):
    """파일 엔트리 저장 요청 모델"""

    path: str = Field(..., description="저장할 경로", min_length=1)
    content: str = Field(default="", description="파일 내용")
    encoding: Optional[str] = Field(default="UTF-8", description="내용 인코딩")
    description: Optional[str] = Field(default=None, description="커밋 메시지")
    properties: Dict[str, str] = Field(default_factory=dict, description="부가 속성")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """경로 유효성 검사"""
        if not v.strip().strip("/"):
            raise ValueError('경로는 필수입니다')
        return v.strip()

    def to_entry(self) -> FileEntry:
        return FileEntry(
            path=self.path,
            content=self.content,
            encoding=self.encoding,
            description=self.description,
            properties=self.properties
        )


class FileEntryDeleteRequest(BaseModel):
    """파일 엔트리 삭제 요청 모델"""

    base_path: str = Field(default="", description="기준 경로")
    file_names: Optional[List[str]] = Field(
        default=None,
        description="삭제할 이름 목록 (없으면 기준 경로 자체를 삭제)"
    )


class FolderCreateRequest(BaseModel):
    """폴더 생성 요청 모델"""

    path: str = Field(default="", description="상위 경로")
    folder_name: str = Field(..., description="폴더 이름", min_length=1, max_length=255)
    comment: Optional[str] = Field(default=None, description="커밋 메시지")

    @field_validator('folder_name')
    @classmethod
    def validate_folder_name(cls, v: str) -> str:
        """폴더 이름 유효성 검사"""
        if "/" in v or v.strip() in ("", ".", ".."):
            raise ValueError('폴더 이름에 / 를 포함하거나 . / .. 를 사용할 수 없습니다')
        return v.strip()


class NewScriptRequest(BaseModel):
    """새 스크립트 생성 요청 모델"""

    path: str = Field(default="", description="상위 경로")
    file_name: str = Field(..., description="파일(또는 프로젝트) 이름", min_length=1)
    name: str = Field(default="", description="테스트 이름")
    url: str = Field(default="http://please_modify_this.com", description="테스트 대상 URL")
    script_type: str = Field(default="groovy", description="스크립트 핸들러 키")
    include_lib_and_resource: bool = Field(default=False, description="lib / resources 폴더 생성 여부")
    options: Optional[str] = Field(default=None, description="템플릿 옵션")


class QuickTestRequest(BaseModel):
    """퀵 테스트 요청 모델"""

    url: str = Field(..., description="테스트 대상 URL", min_length=1)
    script_type: str = Field(default="groovy", description="스크립트 핸들러 키")

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """URL 형식 검사"""
        if not re.match(r'^https?://', v.strip()):
            raise ValueError('URL 은 http:// 또는 https:// 로 시작해야 합니다')
        return v.strip()


class QuickTestResponse(BaseModel):
    """퀵 테스트 응답 모델"""

    path: str = Field(..., description="생성된 퀵 테스트 스크립트 경로")
    script_type: str = Field(..., description="스크립트 핸들러 키")


class HarConvertRequest(BaseModel):
    """HAR 변환 요청 모델"""

    har: str = Field(..., description="HAR 문서 텍스트", min_length=1)
    remove_static_resource: bool = Field(default=True, description="정적 리소스 제거 여부")


class HarConvertResponse(BaseModel):
    """HAR 변환 응답 모델"""

    groovy: str = Field(..., description="Groovy 스크립트")
    jython: str = Field(..., description="Jython 스크립트")


class ScriptHandlerResponse(BaseModel):
    """스크립트 핸들러 정보 응답 모델"""

    key: str = Field(..., description="핸들러 키")
    title: str = Field(..., description="표시 이름")
    extension: str = Field(..., description="확장자")
    codemirror_key: str = Field(..., description="에디터 문법 키")
    is_project_handler: bool = Field(..., description="프로젝트 핸들러 여부")


class SyntaxCheckResponse(BaseModel):
    """문법 검사 응답 모델"""

    valid: bool = Field(..., description="문법 오류 없음 여부")
    error: Optional[str] = Field(None, description="오류 메시지")


class SaveResultResponse(BaseModel):
    """저장/삭제 결과 응답 모델"""

    success: bool = Field(..., description="처리 성공 여부")
    revision: Optional[int] = Field(None, description="새 리비전 번호")


class AnnouncementResponse(BaseModel):
    """공지사항 응답 모델"""

    content: str = Field(..., description="공지사항 내용")
    success: Optional[bool] = Field(None, description="저장 성공 여부 (저장 요청일 때)")


class HealthCheckResponse(BaseModel):
    """헬스 체크 응답 모델"""

    status: str = Field(..., description="서비스 상태")
    timestamp: datetime = Field(..., description="체크 시간")
    components: Dict[str, str] = Field(..., description="컴포넌트 상태")
    version: str = Field(..., description="API 버전")


class ErrorResponse(BaseModel):
    """오류 응답 모델"""

    error: str = Field(..., description="오류 메시지")
    detail: Optional[str] = Field(default=None, description="상세 오류 정보")
    code: Optional[str] = Field(default=None, description="오류 코드")
    timestamp: datetime = Field(default_factory=datetime.now, description="오류 발생 시간")


class AuthTokenRequest(BaseModel):
    """인증 토큰 요청 모델"""

    user_id: str = Field(
        ...,
        description="사용자 ID",
        min_length=1,
        max_length=50
    )
    user_name: Optional[str] = Field(
        None,
        description="사용자 이름",
        max_length=100
    )

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        """사용자 ID 유효성 검사 (저장소 디렉토리 이름으로 사용됨)"""
        if not v or not v.strip():
            raise ValueError('사용자 ID는 필수입니다')

        if not re.match(r'^[a-zA-Z0-9_.-]+$', v) or v.strip(".") == "":
            raise ValueError('사용자 ID는 알파벳, 숫자, _, -, . 만 포함할 수 있습니다')

        return v.strip()


class AuthTokenResponse(BaseModel):
    """인증 토큰 응답 모델"""

    access_token: str = Field(..., description="액세스 토큰")
    token_type: str = Field(default="bearer", description="토큰 타입")
    expires_in: int = Field(..., description="만료 시간 (초)")
    user_id: str = Field(..., description="사용자 ID")
    role: str = Field(..., description="사용자 권한")
