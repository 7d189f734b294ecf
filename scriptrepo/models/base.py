"""
기본 데이터 모델 모듈

파일 엔트리와 사용자 데이터 구조를 정의합니다.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from .enums import FileType, Role


class User(BaseModel):
    """사용자 데이터 모델"""

    user_id: str = Field(
        ...,
        description="사용자 ID (저장소 디렉토리 이름)",
        min_length=1,
        max_length=50
    )
    user_name: str = Field(
        ...,
        description="사용자 이름"
    )
    role: Role = Field(
        default=Role.USER,
        description="사용자 권한"
    )


class FileEntry(BaseModel):
    """버전 관리 파일 엔트리 데이터 모델"""

    path: str = Field(
        default="",
        description="저장소 내 경로"
    )
    file_type: FileType = Field(
        default=FileType.FILE,
        description="파일 타입"
    )
    content: Optional[str] = Field(
        default=None,
        description="텍스트 내용 (단건 조회 시에만 채워짐)"
    )
    content_bytes: Optional[bytes] = Field(
        default=None,
        description="원본 바이트 내용"
    )
    encoding: Optional[str] = Field(
        default=None,
        description="내용 인코딩"
    )
    description: Optional[str] = Field(
        default=None,
        description="설명 (커밋 메시지)"
    )
    properties: Dict[str, str] = Field(
        default_factory=dict,
        description="부가 속성 (예: targetHosts)"
    )
    revision: Optional[int] = Field(
        default=None,
        description="조회한 리비전"
    )
    last_revision: Optional[int] = Field(
        default=None,
        description="마지막으로 변경된 리비전"
    )
    file_size: int = Field(
        default=0,
        description="파일 크기 (바이트)",
        ge=0
    )
    last_modified: Optional[datetime] = Field(
        default=None,
        description="마지막 변경 시간"
    )

    @property
    def file_name(self) -> str:
        """경로의 마지막 요소"""
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def extension(self) -> str:
        """소문자 확장자 (점 제외)"""
        name = self.file_name
        return name.rsplit(".", 1)[-1].lower() if "." in name else ""
