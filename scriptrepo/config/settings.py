"""
설정 관리 모듈

환경 변수를 통한 시스템 설정을 관리합니다.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from ..exceptions import ConfigurationException


class Settings(BaseSettings):
    """시스템 설정 관리 클래스"""

    # 사용자 저장소 설정
    repository_root_dir: str = Field(
        default="./repos",
        description="사용자별 저장소 루트 디렉토리"
    )
    git_author_email_domain: str = Field(
        default="script-repository.local",
        description="커밋 작성자 이메일 도메인"
    )

    # 파일 엔트리 캐시 설정
    file_entry_cache_ttl: int = Field(
        default=3600,
        description="파일 엔트리 목록 캐시 유지 시간 (초)"
    )
    file_entry_cache_max_size: int = Field(
        default=1024,
        description="파일 엔트리 목록 캐시 최대 항목 수"
    )
    file_entry_retry_delay: float = Field(
        default=3.0,
        description="목록 조회 실패 시 재시도 전 대기 시간 (초)"
    )

    # 저장소 생성 워커 설정
    provision_max_workers: int = Field(
        default=4,
        description="저장소 생성 백그라운드 워커 수"
    )

    # 스크립트 템플릿 설정
    template_dir: Optional[str] = Field(
        default=None,
        description="사용자 정의 스크립트 템플릿 디렉토리 (없으면 내장 템플릿 사용)"
    )
    quick_test_placeholder_url: str = Field(
        default="http://please_modify_this.com",
        description="대상 호스트를 기록하지 않는 자리표시 URL"
    )

    # 공지사항 설정
    announcement_file: str = Field(
        default="./home/announcement.conf",
        description="시스템 공지사항 저장 파일"
    )

    # 로깅 설정
    log_level: str = Field(
        default="INFO",
        description="로그 레벨"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="로그 포맷"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="로그 파일 경로"
    )

    # API 설정
    api_host: str = Field(
        default="0.0.0.0",
        description="API 서버 호스트"
    )
    api_port: int = Field(
        default=8000,
        description="API 서버 포트"
    )
    api_reload: bool = Field(
        default=True,
        description="API 서버 자동 재로드 (개발용)"
    )

    # JWT 인증 설정
    jwt_secret_key: str = Field(
        default="your-secret-key-change-in-production",
        description="JWT 서명용 비밀 키"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT 알고리즘"
    )
    jwt_expires_hours: int = Field(
        default=24,
        description="JWT 토큰 만료 시간 (시간)"
    )
    admin_user_ids: list[str] = Field(
        default=["admin"],
        description="관리자 권한(A)으로 토큰을 발급할 사용자 ID 목록"
    )

    # CORS 설정
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="CORS 허용 오리진 목록"
    )
    cors_credentials: bool = Field(
        default=True,
        description="CORS 자격 증명 허용"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        # 환경 변수 이름을 대문자로 변환
        case_sensitive = False

    def validate_configuration(self) -> None:
        """설정 유효성 검증"""
        if not self.repository_root_dir:
            raise ConfigurationException(
                "REPOSITORY_ROOT_DIR", "사용자 저장소 루트 디렉토리가 필요합니다"
            )

        if self.file_entry_retry_delay < 0:
            raise ConfigurationException(
                "FILE_ENTRY_RETRY_DELAY", "0 이상이어야 합니다"
            )

        if self.provision_max_workers < 1:
            raise ConfigurationException(
                "PROVISION_MAX_WORKERS", "1 이상이어야 합니다"
            )

        if self.template_dir and not os.path.isdir(self.template_dir):
            raise ConfigurationException(
                "TEMPLATE_DIR", f"디렉토리가 존재하지 않습니다: {self.template_dir}"
            )

        # 저장소 루트 디렉토리 생성
        os.makedirs(self.repository_root_dir, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """
    설정 인스턴스를 반환합니다 (싱글톤 패턴)

    Returns:
        Settings: 설정 인스턴스
    """
    settings = Settings()
    settings.validate_configuration()
    return settings
