"""
데이터 모델 패키지

스크립트 저장소 시스템의 핵심 데이터 모델들을 정의합니다.
"""

from .base import FileEntry, User
from .enums import FileType, HookType, Role
from .har import Har, HarEntry, HarHeader, Request

__all__ = [
    "FileEntry",
    "User",
    "FileType",
    "HookType",
    "Role",
    "Har",
    "HarEntry",
    "HarHeader",
    "Request",
]
