"""
열거형 정의 모듈

스크립트 저장소 시스템에서 사용되는 상수 값들을 열거형으로 정의합니다.
"""

from enum import Enum


class FileType(Enum):
    """파일 엔트리 타입 열거형"""
    FILE = "FILE"
    DIR = "DIR"


class Role(Enum):
    """사용자 권한 열거형"""
    ADMIN = "A"
    SUPER_USER = "S"
    USER = "U"
    SYSTEM_USER = "SYSTEM_USER"


class HookType(Enum):
    """저장소 훅 타입 열거형"""
    POST_COMMIT = "post-commit"
