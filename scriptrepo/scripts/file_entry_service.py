"""
파일 엔트리 서비스 모듈

사용자별 스크립트 저장소의 생성, 목록 캐싱, 조회/저장/삭제,
템플릿 기반 스크립트 생성, HAR 변환을 하나의 인터페이스로 제공합니다.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import IO, Any, Optional, Union

from ..config.settings import Settings
from ..exceptions import FileEntryException, PreconditionException, RepositoryProvisionException
from ..models.base import FileEntry, User
from ..models.enums import FileType, HookType
from ..utils.helpers import (
    divide_path_and_file,
    get_host,
    get_path_from_url,
    get_target_hosts,
    join_path,
    retry_with_backoff,
)
from ..utils.logging import get_logger
from . import har_converter
from .cache_manager import FILE_ENTRY_CACHE, CacheManager
from .handlers import ScriptHandler, ScriptHandlerFactory
from .hooks import HookEvent
from .repository import GitFileEntryRepository
from .renderer import TemplateRenderer

logger = get_logger(__name__)

# 프로젝트 핸들러의 메인 스크립트를 생성하는 핸들러
PROJECT_MAIN_SCRIPT_HANDLER = "groovy"

# HAR 변환 결과를 만드는 핸들러
HAR_TARGET_HANDLERS = ("groovy", "jython")


class FileEntryService:
    """사용자 스크립트 파일 엔트리 서비스"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repository: Optional[GitFileEntryRepository] = None,
        cache_manager: Optional[CacheManager] = None,
        handler_factory: Optional[ScriptHandlerFactory] = None
    ):
        """
        파일 엔트리 서비스 초기화

        Args:
            settings: 시스템 설정 (None이면 기본 설정 사용)
            repository: 파일 엔트리 저장소
            cache_manager: 캐시 매니저
            handler_factory: 스크립트 핸들러 등록소
        """
        if settings is None:
            from ..config.settings import get_settings
            settings = get_settings()

        self.settings = settings
        self.logger = logger

        self.repository = repository or GitFileEntryRepository(settings)
        self.cache_manager = cache_manager or CacheManager(settings)
        self.handler_factory = handler_factory or ScriptHandlerFactory(
            TemplateRenderer(settings), self.repository
        )
        self.file_entry_cache = self.cache_manager.get_cache(FILE_ENTRY_CACHE)

        self._executor = ThreadPoolExecutor(
            max_workers=settings.provision_max_workers,
            thread_name_prefix="repo-provision"
        )
        self._provision_locks: dict[str, threading.Lock] = {}
        self._provision_locks_guard = threading.Lock()

        # 커밋이 일어나면 해당 사용자의 목록 캐시를 비움
        self.repository.hooks.subscribe(HookType.POST_COMMIT, self._on_post_commit)

        self.logger.info(f"파일 엔트리 서비스 초기화 완료: {self.repository.root_dir}")

    # 저장소 생성

    def prepare(self, user: User) -> Future:
        """
        사용자 저장소 생성을 백그라운드로 요청

        실패는 로그로만 남고 호출자에게 전달되지 않습니다.

        Args:
            user: 사용자

        Returns:
            Future: 생성 작업 (완료 대기가 필요할 때만 사용)
        """
        self.logger.debug(f"저장소 준비 요청: {user.user_id}")
        return self._executor.submit(self.ensure_repository, user)

    def ensure_repository(self, user: User) -> None:
        """
        사용자 저장소가 없으면 생성

        사용자 단위로 직렬화되어 동시 호출에서도 생성은 한 번만 시도됩니다.
        최초 커밋이 없는 저장소는 없는 것으로 보고 다시 생성합니다.
        저장소 오류는 로그만 남기고 무시합니다.

        Args:
            user: 사용자
        """
        with self._provision_lock_for(user):
            if self.repository.has_repository(user):
                return
            try:
                self.repository.create_repository(
                    self.repository.get_user_repo_directory(user), user.user_id
                )
                self.logger.info(f"사용자 저장소 생성: {user.user_id}")
            except RepositoryProvisionException as e:
                self.logger.error(f"사용자 저장소 생성 실패: {user.user_id} - {e}")

    def invalidate_cache(self, user_id: str) -> None:
        """사용자 파일 엔트리 목록 캐시 무효화"""
        self.file_entry_cache.evict(user_id)

    def _on_post_commit(self, event: HookEvent) -> None:
        self.invalidate_cache(event.repository_name)

    def _provision_lock_for(self, user: User) -> threading.Lock:
        with self._provision_locks_guard:
            return self._provision_locks.setdefault(user.user_id, threading.Lock())

    # 조회

    async def get_all(
        self,
        user: User,
        path: Optional[str] = None,
        revision: Optional[int] = None
    ) -> Union[tuple[FileEntry, ...], list[FileEntry]]:
        """
        파일 엔트리 목록 조회

        path 가 없으면 전체 목록을 캐시에서 조회하며, 캐시에 없으면 저장소를 조회합니다.
        저장소 조회 실패 시 설정된 시간만큼 기다린 뒤 한 번 더 시도합니다.
        path 가 주어지면 해당 리비전의 디렉토리 목록을 캐시 없이 조회합니다.

        Args:
            user: 사용자
            path: 디렉토리 경로 (선택사항)
            revision: 리비전 (None 또는 -1 이면 HEAD)

        Returns:
            전체 목록이면 불변 튜플, 디렉토리 목록이면 리스트

        Raises:
            FileEntryException: 재시도 후에도 조회에 실패했을 때
        """
        self.ensure_repository(user)

        if path is not None:
            return self.repository.find_all(user, path, revision)

        cached = self.file_entry_cache.get(user.user_id)
        if cached is not None:
            self.logger.debug(f"파일 엔트리 캐시 적중: {user.user_id}")
            return cached

        # 조회 도중 커밋으로 무효화되면 결과를 캐시에 넣지 않음
        generation = self.file_entry_cache.generation(user.user_id)

        try:
            entries = await retry_with_backoff(
                lambda: self.repository.find_all(user),
                max_retries=1,
                initial_delay=self.settings.file_entry_retry_delay,
                backoff_factor=1.0
            )
        except FileEntryException:
            raise
        except Exception as e:
            raise FileEntryException("목록 조회", None, str(e)) from e

        result = tuple(entries)
        self.file_entry_cache.put(user.user_id, result, generation)
        return result

    async def get_one(self, user: User, path: str, revision: Optional[int] = None) -> Optional[FileEntry]:
        """
        파일 엔트리 단건 조회 (내용 포함)

        Args:
            user: 사용자
            path: 파일 경로
            revision: 리비전 (None 또는 -1 이면 HEAD)

        Returns:
            파일 엔트리 (없으면 None)
        """
        self.ensure_repository(user)
        return self.repository.find_one(user, path, revision)

    async def has_file_entry(self, user: User, path: str) -> bool:
        """HEAD 에 파일 엔트리가 존재하는지 확인"""
        self.ensure_repository(user)
        return self.repository.has_one(user, path)

    # 변경

    async def save(self, user: User, entry: FileEntry) -> int:
        """
        파일 엔트리 저장

        Args:
            user: 사용자
            entry: 저장할 엔트리

        Returns:
            새 리비전 번호

        Raises:
            PreconditionException: 경로가 비어 있을 때
        """
        if not entry.path or not entry.path.strip():
            raise PreconditionException("path")

        self.ensure_repository(user)
        return self.repository.save(user, entry, entry.encoding)

    async def delete(self, user: User, base_path: str, file_names: Optional[list[str]] = None) -> Optional[int]:
        """
        파일 엔트리 삭제

        file_names 가 주어지면 base_path 아래의 각 이름을 하나의 커밋으로 삭제하고,
        없으면 base_path 자체를 삭제합니다.

        Args:
            user: 사용자
            base_path: 기준 경로 또는 삭제할 경로
            file_names: 삭제할 이름 목록 (선택사항)

        Returns:
            새 리비전 번호 (삭제된 것이 없으면 None)
        """
        if file_names is None:
            paths = [base_path]
        else:
            paths = [join_path(base_path, name) for name in file_names]

        if not paths or not all(path and path.strip("/") for path in paths):
            raise PreconditionException("path")

        return self.repository.delete(user, paths)

    async def add_folder(self, user: User, path: str, folder_name: str, comment: Optional[str] = None) -> int:
        """
        폴더 추가

        Args:
            user: 사용자
            path: 상위 경로
            folder_name: 폴더 이름
            comment: 커밋 메시지

        Returns:
            새 리비전 번호
        """
        if not folder_name:
            raise PreconditionException("folder_name")

        entry = FileEntry(
            path=join_path(path, folder_name),
            file_type=FileType.DIR,
            description=comment
        )
        return await self.save(user, entry)

    async def write_content_to(self, user: User, from_path: str, to_dir: Union[str, Path]) -> None:
        """
        저장소 내용을 로컬 디렉토리로 내보내기

        Args:
            user: 사용자
            from_path: 저장소 경로
            to_dir: 대상 디렉토리
        """
        self.repository.write_content_to(user, from_path, Path(to_dir))
        self.logger.info(f"저장소 내용 내보내기: {user.user_id}:{from_path} -> {to_dir}")

    # 스크립트 생성

    def get_script_handler(self, key_or_entry: Union[str, FileEntry]) -> Optional[ScriptHandler]:
        """
        스크립트 핸들러 조회

        Args:
            key_or_entry: 핸들러 키 또는 파일 엔트리

        Returns:
            핸들러 (엔트리로 조회 시 처리 가능한 핸들러가 없으면 None)
        """
        if isinstance(key_or_entry, FileEntry):
            return self.handler_factory.get_handler_for_entry(key_or_entry)
        return self.handler_factory.get_handler(key_or_entry)

    def load_template(
        self,
        user: User,
        handler: ScriptHandler,
        url: str,
        name: str,
        options: Optional[str] = None
    ) -> str:
        """
        스크립트 템플릿 렌더링

        Args:
            user: 사용자
            handler: 스크립트 핸들러
            url: 테스트 대상 URL
            name: 테스트 이름
            options: 템플릿 옵션

        Returns:
            생성된 스크립트
        """
        params = {
            "url": url,
            "userName": user.user_name,
            "name": name,
            "options": options,
        }
        return handler.get_script_template(params)

    async def prepare_new_entry(
        self,
        user: User,
        path: str,
        file_name: str,
        name: str,
        url: str,
        handler: ScriptHandler,
        include_lib_and_resource: bool,
        options: Optional[str] = None
    ) -> Optional[FileEntry]:
        """
        새 스크립트 엔트리 준비

        프로젝트 핸들러는 프로젝트 구성을 직접 저장하고 None 을 반환합니다.
        그 외 핸들러는 저장되지 않은 엔트리를 반환합니다.

        Args:
            user: 사용자
            path: 상위 경로
            file_name: 파일(또는 프로젝트) 이름
            name: 테스트 이름
            url: 테스트 대상 URL
            handler: 스크립트 핸들러
            include_lib_and_resource: lib / resources 폴더 생성 여부
            options: 템플릿 옵션

        Returns:
            새 엔트리 (프로젝트 핸들러면 None)
        """
        if handler.is_project_handler:
            self.ensure_repository(user)
            main_handler = self.get_script_handler(PROJECT_MAIN_SCRIPT_HANDLER)
            handler.prepare_script_env(
                user, path, file_name, name, url, include_lib_and_resource,
                self.load_template(user, main_handler, url, name, options)
            )
            return None

        entry = FileEntry(
            path=join_path(path, file_name),
            content=self.load_template(user, handler, url, name, options),
            encoding="UTF-8"
        )
        entry.properties = get_target_hosts(url, self.settings.quick_test_placeholder_url)

        if include_lib_and_resource:
            self.ensure_repository(user)
            handler.prepare_script_env(user, path, file_name, name, url, include_lib_and_resource, entry.content)

        return entry

    async def prepare_new_entry_for_quick_test(self, user: User, url: str, handler: ScriptHandler) -> str:
        """
        URL 로부터 퀵 테스트 스크립트 생성

        Args:
            user: 사용자
            url: 테스트 대상 URL
            handler: 스크립트 핸들러

        Returns:
            퀵 테스트 스크립트 경로

        Raises:
            FileEntryException: URL 을 해석할 수 없을 때
        """
        path = get_path_from_url(url)
        host = get_host(url)
        quick_test_path = handler.get_default_quick_test_file_path(path)

        if handler.is_project_handler:
            parent, project_name = divide_path_and_file(path)
            await self.prepare_new_entry(user, parent, project_name, host, url, handler, False)
        else:
            _, file_name = divide_path_and_file(quick_test_path)
            entry = await self.prepare_new_entry(user, path, file_name, host, url, handler, False)
            entry.description = f"Quick test for {url}"
            await self.save(user, entry)

        self.logger.info(f"퀵 테스트 생성: {user.user_id}:{quick_test_path}")
        return quick_test_path

    # HAR

    def convert_to_script(self, har: Union[str, bytes], remove_static_resource: bool) -> dict[str, str]:
        """
        HAR 을 스크립트로 변환

        Args:
            har: HAR 문서 텍스트
            remove_static_resource: 정적 리소스 제거 여부

        Returns:
            {"groovy": 스크립트, "jython": 스크립트}
        """
        params: dict[str, Any] = har_converter.get_har_param(har, remove_static_resource)
        return {
            key: self.get_script_handler(key).get_script_template(params)
            for key in HAR_TARGET_HANDLERS
        }

    def load_har(self, source: Union[str, bytes, IO], remove_static_resource: bool) -> str:
        """
        업로드된 HAR 을 JSON 텍스트로 반환

        Args:
            source: HAR 텍스트, 바이트 또는 파일 객체
            remove_static_resource: 정적 리소스 제거 여부

        Returns:
            들여쓰기 된 HAR JSON 텍스트
        """
        return har_converter.load_har(source, remove_static_resource)

    def shutdown(self) -> None:
        """백그라운드 워커 종료"""
        self.repository.hooks.unsubscribe(HookType.POST_COMMIT, self._on_post_commit)
        self._executor.shutdown(wait=True)
        self.logger.info("파일 엔트리 서비스 종료")
