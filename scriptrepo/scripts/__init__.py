"""
스크립트 저장소 모듈

사용자별 Git 저장소의 파일 엔트리 관리, 스크립트 템플릿 생성,
HAR 변환 기능을 제공합니다.
"""

from .cache_manager import FILE_ENTRY_CACHE, CacheManager
from .file_entry_service import FileEntryService
from .handlers import (
    GroovyMavenProjectScriptHandler,
    GroovyScriptHandler,
    JythonScriptHandler,
    ScriptHandler,
    ScriptHandlerFactory,
)
from .hooks import HookEvent, HookRegistry
from .repository import GitFileEntryRepository
from .renderer import TemplateRenderer

__all__ = [
    "CacheManager",
    "FILE_ENTRY_CACHE",
    "FileEntryService",
    "GitFileEntryRepository",
    "GroovyMavenProjectScriptHandler",
    "GroovyScriptHandler",
    "HookEvent",
    "HookRegistry",
    "JythonScriptHandler",
    "ScriptHandler",
    "ScriptHandlerFactory",
    "TemplateRenderer",
]
