"""
스크립트 핸들러 모듈

스크립트 언어별로 템플릿 렌더링, 퀵 테스트 기본 경로, 프로젝트 구성,
문법 검사를 담당하는 핸들러와 핸들러 등록소를 제공합니다.
"""

import ast
from typing import Any, Iterable, Mapping, Optional

from ..exceptions import ScriptHandlerNotFoundException
from ..models.base import FileEntry, User
from ..models.enums import FileType
from ..utils.helpers import get_target_hosts, join_path
from ..utils.logging import LoggerMixin
from .repository import GitFileEntryRepository
from .renderer import TemplateRenderer

QUICK_TEST_FILE_NAME = "TestRunner"


class ScriptHandler(LoggerMixin):
    """스크립트 핸들러 기본 클래스"""

    key: str = ""
    extension: str = ""
    title: str = ""
    codemirror_key: str = ""
    order: int = 1000
    template_key: str = ""
    is_project_handler: bool = False

    def __init__(self, renderer: TemplateRenderer, repository: GitFileEntryRepository):
        """
        스크립트 핸들러 초기화

        Args:
            renderer: 템플릿 렌더러
            repository: 파일 엔트리 저장소 (프로젝트 구성용)
        """
        self.renderer = renderer
        self.repository = repository

    def can_handle(self, entry: FileEntry) -> bool:
        """확장자로 처리 가능 여부 판단"""
        return entry.file_type == FileType.FILE and entry.extension == self.extension

    def get_script_template(self, params: Mapping[str, Any]) -> str:
        """
        스크립트 템플릿 렌더링

        Args:
            params: url, userName, name, options 또는 requests, commonHeader

        Returns:
            생성된 스크립트
        """
        return self.renderer.render(self.template_key, params)

    def get_default_quick_test_file_path(self, base_path: str) -> str:
        """퀵 테스트 스크립트 기본 경로"""
        return join_path(base_path, f"{QUICK_TEST_FILE_NAME}.{self.extension}")

    def prepare_script_env(
        self,
        user: User,
        path: str,
        file_name: str,
        name: str,
        url: str,
        include_lib_and_resource: bool,
        script_content: Optional[str]
    ) -> None:
        """
        스크립트 실행 환경 구성

        단일 파일 스크립트는 요청 시 lib / resources 폴더만 만듭니다.
        """
        if not include_lib_and_resource:
            return

        for folder in ("lib", "resources"):
            self.repository.save(
                user,
                FileEntry(
                    path=join_path(path, folder),
                    file_type=FileType.DIR,
                    description=f"{folder} 폴더 생성"
                )
            )

    def check_syntax_errors(self, script: str) -> Optional[str]:
        """
        문법 검사

        Returns:
            오류 메시지 (검사기가 없거나 오류가 없으면 None)
        """
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key={self.key!r})"


class GroovyScriptHandler(ScriptHandler):
    """Groovy 스크립트 핸들러"""

    key = "groovy"
    extension = "groovy"
    title = "Groovy"
    codemirror_key = "groovy"
    order = 200
    template_key = "groovy/basic_template.groovy.j2"


class JythonScriptHandler(ScriptHandler):
    """Jython 스크립트 핸들러"""

    key = "jython"
    extension = "py"
    title = "Jython"
    codemirror_key = "python"
    order = 300
    template_key = "jython/basic_template.py.j2"

    def check_syntax_errors(self, script: str) -> Optional[str]:
        try:
            ast.parse(script)
        except SyntaxError as e:
            return f"{e.lineno}번째 줄: {e.msg}"
        return None


class GroovyMavenProjectScriptHandler(GroovyScriptHandler):
    """Groovy Maven 프로젝트 핸들러 (여러 파일로 구성되는 프로젝트)"""

    key = "groovy_maven"
    title = "Groovy Maven Project"
    order = 100
    is_project_handler = True

    MAIN_SOURCE_DIR = "src/main/java"
    RESOURCE_DIR = "src/main/resources"
    POM_TEMPLATE_KEY = "groovy_maven/pom.xml.j2"

    def can_handle(self, entry: FileEntry) -> bool:
        return super().can_handle(entry) and f"{self.MAIN_SOURCE_DIR}/" in entry.path

    def get_default_quick_test_file_path(self, base_path: str) -> str:
        return join_path(
            join_path(base_path, self.MAIN_SOURCE_DIR),
            f"{QUICK_TEST_FILE_NAME}.{self.extension}"
        )

    def prepare_script_env(
        self,
        user: User,
        path: str,
        file_name: str,
        name: str,
        url: str,
        include_lib_and_resource: bool,
        script_content: Optional[str]
    ) -> None:
        """
        Maven 프로젝트 구성

        pom.xml, 메인 스크립트, 리소스 폴더를 저장합니다.
        """
        project_path = join_path(path, file_name)
        self.logger.info(f"프로젝트 구성 시작: {user.user_id}:{project_path}")

        pom = self.renderer.render(self.POM_TEMPLATE_KEY, {"name": name, "url": url})
        self.repository.save(
            user,
            FileEntry(path=join_path(project_path, "pom.xml"), content=pom, description="pom.xml 생성"),
            "UTF-8"
        )

        self.repository.save(
            user,
            FileEntry(
                path=self.get_default_quick_test_file_path(project_path),
                content=script_content or "",
                description=f"{name} 메인 스크립트 생성",
                properties=get_target_hosts(url, self.repository.settings.quick_test_placeholder_url)
            ),
            "UTF-8"
        )

        self.repository.save(
            user,
            FileEntry(
                path=join_path(project_path, self.RESOURCE_DIR),
                file_type=FileType.DIR,
                description="resources 폴더 생성"
            )
        )


DEFAULT_HANDLER_CLASSES = (
    GroovyMavenProjectScriptHandler,
    GroovyScriptHandler,
    JythonScriptHandler,
)


class ScriptHandlerFactory:
    """스크립트 핸들러 등록소"""

    def __init__(
        self,
        renderer: TemplateRenderer,
        repository: GitFileEntryRepository,
        handlers: Optional[Iterable[ScriptHandler]] = None
    ):
        """
        핸들러 등록소 초기화

        Args:
            renderer: 템플릿 렌더러
            repository: 파일 엔트리 저장소
            handlers: 등록할 핸들러 (없으면 기본 핸들러)
        """
        if handlers is None:
            handlers = [cls(renderer, repository) for cls in DEFAULT_HANDLER_CLASSES]
        self.handlers = sorted(handlers, key=lambda handler: handler.order)

    def get_handler(self, key: str) -> ScriptHandler:
        """
        키로 핸들러 조회

        Raises:
            ScriptHandlerNotFoundException: 등록되지 않은 키일 때
        """
        for handler in self.handlers:
            if handler.key == key:
                return handler
        raise ScriptHandlerNotFoundException(key)

    def get_handler_for_entry(self, entry: FileEntry) -> Optional[ScriptHandler]:
        """파일 엔트리를 처리할 수 있는 첫 번째 핸들러 (order 순)"""
        for handler in self.handlers:
            if handler.can_handle(entry):
                return handler
        return None
