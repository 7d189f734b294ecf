"""
파일 엔트리 서비스 테스트

저장소 생성, 목록 캐싱과 재시도, 스크립트 생성, HAR 변환을 확인합니다.
"""

import threading
from unittest.mock import AsyncMock, patch

import git
import pytest
from git.exc import GitCommandError

from scriptrepo.exceptions import FileEntryException, PreconditionException, RepositoryProvisionException
from scriptrepo.models.base import FileEntry, User
from scriptrepo.models.enums import FileType
from scriptrepo.scripts.cache_manager import FILE_ENTRY_CACHE
from scriptrepo.scripts.handlers import GroovyScriptHandler


class TestProvisioning:
    """사용자 저장소 생성 테스트"""

    def test_ensure_repository_creates_once(self, service, user):
        """두 번째 호출은 생성을 시도하지 않음"""
        with patch.object(
            service.repository, "create_repository", wraps=service.repository.create_repository
        ) as create:
            service.ensure_repository(user)
            service.ensure_repository(user)

        create.assert_called_once_with(service.repository.get_user_repo_directory(user), "tester")
        assert service.repository.get_user_repo_directory(user).is_dir()

    def test_concurrent_ensure_repository(self, service, user):
        """동시 호출에서도 생성은 한 번"""
        with patch.object(
            service.repository, "create_repository", wraps=service.repository.create_repository
        ) as create:
            threads = [threading.Thread(target=service.ensure_repository, args=(user,)) for _ in range(5)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert create.call_count == 1

    def test_ensure_repository_swallows_errors(self, service, user):
        """저장소 오류는 전파되지 않음"""
        with patch.object(
            service.repository, "create_repository",
            side_effect=RepositoryProvisionException("tester", "init 실패")
        ):
            service.ensure_repository(user)

        assert not service.repository.get_user_repo_directory(user).exists()

    def test_prepare_in_background(self, service, user):
        """백그라운드 생성"""
        future = service.prepare(user)
        future.result(timeout=10)

        assert service.repository.get_user_repo_directory(user).joinpath(".git").is_dir()

    def test_prepare_failure_is_not_raised(self, service, user):
        """백그라운드 생성 실패는 호출자에게 전달되지 않음"""
        with patch.object(
            service.repository, "create_repository",
            side_effect=RepositoryProvisionException("tester", "권한 없음")
        ):
            future = service.prepare(user)
            assert future.result(timeout=10) is None

    @pytest.mark.asyncio
    async def test_failed_initial_commit_is_retried(self, service, user):
        """최초 커밋 실패 후 다음 호출에서 다시 생성"""
        directory = service.repository.get_user_repo_directory(user)

        with patch.object(git.IndexFile, "commit", side_effect=GitCommandError("commit", 1)):
            service.ensure_repository(user)
        assert not directory.exists()

        service.ensure_repository(user)

        assert service.repository.has_repository(user)
        assert await service.get_one(user, "a.txt") is None
        assert await service.save(user, FileEntry(path="a.txt", content="a")) == 1

    @pytest.mark.asyncio
    async def test_repository_without_head_is_recreated(self, service, user):
        """최초 커밋이 없는 저장소는 다시 생성"""
        git.Repo.init(service.repository.get_user_repo_directory(user))

        assert await service.save(user, FileEntry(path="a.txt", content="a")) == 1


class TestGetAll:
    """목록 조회 테스트"""

    @pytest.mark.asyncio
    async def test_returns_tuple_and_caches(self, service, user):
        """두 번째 조회는 캐시 사용"""
        await service.save(user, FileEntry(path="a.py", content="a"))

        with patch.object(service.repository, "find_all", wraps=service.repository.find_all) as find_all:
            first = await service.get_all(user)
            second = await service.get_all(user)

        assert isinstance(first, tuple)
        assert first == second
        assert [entry.path for entry in first] == ["a.py"]
        find_all.assert_called_once()

    @pytest.mark.asyncio
    async def test_commit_invalidates_cache(self, service, user):
        """커밋이 일어나면 목록 캐시 무효화"""
        await service.get_all(user)
        assert service.cache_manager.get_cache(FILE_ENTRY_CACHE).get(user.user_id) == ()

        await service.save(user, FileEntry(path="b.py", content="b"))

        assert service.cache_manager.get_cache(FILE_ENTRY_CACHE).get(user.user_id) is None
        assert [entry.path for entry in await service.get_all(user)] == ["b.py"]

    @pytest.mark.asyncio
    async def test_invalidate_only_target_user(self, service, user):
        """다른 사용자의 캐시는 유지"""
        other = User(user_id="other", user_name="other")
        await service.get_all(user)
        await service.get_all(other)

        service.invalidate_cache(user.user_id)

        cache = service.cache_manager.get_cache(FILE_ENTRY_CACHE)
        assert cache.get(user.user_id) is None
        assert cache.get(other.user_id) == ()

    @pytest.mark.asyncio
    async def test_retry_once_after_delay(self, service, user):
        """한 번 실패하면 설정된 시간 후 재시도"""
        service.settings.file_entry_retry_delay = 3.0
        entries = [FileEntry(path="a.py")]

        with patch.object(service.repository, "find_all", side_effect=[RuntimeError("일시 오류"), entries]), \
                patch("scriptrepo.utils.helpers.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await service.get_all(user)

        assert result == tuple(entries)
        sleep.assert_awaited_once_with(3.0)

    @pytest.mark.asyncio
    async def test_second_failure_is_wrapped(self, service, user):
        """재시도도 실패하면 FileEntryException"""
        with patch.object(
            service.repository, "find_all", side_effect=[RuntimeError("첫 번째"), RuntimeError("두 번째")]
        ) as find_all, patch("scriptrepo.utils.helpers.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(FileEntryException) as exc_info:
                await service.get_all(user)

        assert find_all.call_count == 2
        assert "두 번째" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_directory_listing_at_revision(self, service, user):
        """디렉토리 목록은 캐시 없이 리비전 기준 조회"""
        await service.save(user, FileEntry(path="d/a.py", content="a"))
        await service.save(user, FileEntry(path="d/b.py", content="b"))

        head = await service.get_all(user, "d", -1)
        first = await service.get_all(user, "d", 1)

        assert [entry.path for entry in head] == ["d/a.py", "d/b.py"]
        assert [entry.path for entry in first] == ["d/a.py"]
        assert service.cache_manager.get_cache(FILE_ENTRY_CACHE).get(user.user_id) is None


    @pytest.mark.asyncio
    async def test_invalidated_during_listing_is_not_cached(self, service, user):
        """조회 도중 무효화되면 결과를 캐시하지 않음"""
        await service.save(user, FileEntry(path="a.py", content="a"))
        find_all = service.repository.find_all

        def find_all_then_commit(*args, **kwargs):
            entries = find_all(*args, **kwargs)
            service.invalidate_cache(user.user_id)
            return entries

        with patch.object(service.repository, "find_all", side_effect=find_all_then_commit):
            result = await service.get_all(user)

        assert [entry.path for entry in result] == ["a.py"]
        assert service.cache_manager.get_cache(FILE_ENTRY_CACHE).get(user.user_id) is None


class TestSingleEntry:
    """단건 작업 테스트"""

    @pytest.mark.asyncio
    async def test_save_and_get_one(self, service, user):
        """저장 후 리비전별 조회"""
        await service.save(user, FileEntry(path="t.py", content="v1", encoding="UTF-8"))
        await service.save(user, FileEntry(path="t.py", content="v2", encoding="UTF-8", description="수정"))

        assert (await service.get_one(user, "t.py")).content == "v2"
        assert (await service.get_one(user, "t.py", 1)).content == "v1"
        assert (await service.get_one(user, "t.py")).description == "수정"
        assert await service.get_one(user, "none.py") is None
        assert await service.has_file_entry(user, "t.py") is True

    @pytest.mark.asyncio
    async def test_save_requires_path(self, service, user):
        """경로가 비어 있으면 저장소에 접근하지 않음"""
        with patch.object(service.repository, "save") as save:
            with pytest.raises(PreconditionException):
                await service.save(user, FileEntry(path="  ", content="x"))

        save.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_names_under_base_path(self, service, user):
        """기준 경로 아래 여러 파일 삭제"""
        await service.save(user, FileEntry(path="d/a.py", content="a"))
        await service.save(user, FileEntry(path="d/b.py", content="b"))
        await service.save(user, FileEntry(path="d/c.py", content="c"))

        revision = await service.delete(user, "d", ["a.py", "b.py"])

        assert revision == 4
        assert [entry.path for entry in await service.get_all(user, "d")] == ["d/c.py"]

    @pytest.mark.asyncio
    async def test_delete_single_path(self, service, user):
        """단일 경로 삭제"""
        await service.save(user, FileEntry(path="x.py", content="x"))

        await service.delete(user, "x.py")

        assert await service.has_file_entry(user, "x.py") is False

    @pytest.mark.asyncio
    async def test_add_folder(self, service, user):
        """폴더 추가"""
        await service.add_folder(user, "perf", "login", "로그인 시나리오")

        folder = await service.get_one(user, "perf/login")

        assert folder.file_type == FileType.DIR
        assert folder.description == "로그인 시나리오"

    @pytest.mark.asyncio
    async def test_write_content_to(self, service, user, tmp_path):
        """로컬 디렉토리 내보내기"""
        await service.save(user, FileEntry(path="dist/TestRunner.groovy", content="script"))

        await service.write_content_to(user, "dist", tmp_path / "agent")

        assert (tmp_path / "agent" / "TestRunner.groovy").read_text() == "script"

    def test_get_script_handler(self, service):
        """키 또는 엔트리로 핸들러 조회"""
        assert isinstance(service.get_script_handler("groovy"), GroovyScriptHandler)
        assert service.get_script_handler(FileEntry(path="a/b.py")).key == "jython"
        assert service.get_script_handler(FileEntry(path="a/b.txt")) is None


class TestScriptTemplates:
    """스크립트 생성 테스트"""

    def test_load_template(self, service, user):
        """템플릿 파라미터 전달"""
        script = service.load_template(
            user, service.get_script_handler("groovy"), "http://example.com/", "example", None
        )

        assert "@author 테스터" in script
        assert "new GTest(1, 'example')" in script

    @pytest.mark.asyncio
    async def test_prepare_new_entry(self, service, user):
        """저장되지 않은 새 엔트리"""
        entry = await service.prepare_new_entry(
            user, "perf", "Login.groovy", "login", "http://example.com:8080/login",
            service.get_script_handler("groovy"), False
        )

        assert entry.path == "perf/Login.groovy"
        assert entry.properties == {"targetHosts": "example.com"}
        assert "http://example.com:8080/login" in entry.content
        assert await service.has_file_entry(user, "perf/Login.groovy") is False

    @pytest.mark.asyncio
    async def test_placeholder_url_has_no_target_hosts(self, service, user):
        """자리표시 URL 은 대상 호스트를 기록하지 않음"""
        entry = await service.prepare_new_entry(
            user, "", "Test.py", "test", "http://please_modify_this.com",
            service.get_script_handler("jython"), False
        )

        assert entry.properties == {}

    @pytest.mark.asyncio
    async def test_prepare_new_entry_with_lib_and_resources(self, service, user):
        """lib / resources 폴더 생성"""
        await service.prepare_new_entry(
            user, "perf", "Login.groovy", "login", "http://example.com/",
            service.get_script_handler("groovy"), True
        )

        assert await service.has_file_entry(user, "perf/lib") is True
        assert await service.has_file_entry(user, "perf/resources") is True

    @pytest.mark.asyncio
    async def test_project_handler_scaffold(self, service, user):
        """프로젝트 핸들러는 구성을 저장하고 None 반환"""
        result = await service.prepare_new_entry(
            user, "perf", "shop", "shop", "http://shop.example.com/",
            service.get_script_handler("groovy_maven"), False
        )

        main = await service.get_one(user, "perf/shop/src/main/java/TestRunner.groovy")
        pom = await service.get_one(user, "perf/shop/pom.xml")

        assert result is None
        assert "@RunWith(GrinderRunner)" in main.content
        assert main.properties == {"targetHosts": "shop.example.com"}
        assert "<artifactId>shop</artifactId>" in pom.content
        assert await service.has_file_entry(user, "perf/shop/src/main/resources") is True

    @pytest.mark.asyncio
    async def test_project_scaffold_placeholder_url(self, service, user):
        """프로젝트 메인 스크립트도 자리표시 URL 은 대상 호스트를 기록하지 않음"""
        await service.prepare_new_entry(
            user, "", "shop", "shop", "http://please_modify_this.com",
            service.get_script_handler("groovy_maven"), False
        )

        main = await service.get_one(user, "shop/src/main/java/TestRunner.groovy")

        assert main.properties == {}


class TestQuickTest:
    """퀵 테스트 생성 테스트"""

    @pytest.mark.asyncio
    async def test_single_file_quick_test(self, service, user):
        """단일 파일 퀵 테스트 저장"""
        path = await service.prepare_new_entry_for_quick_test(
            user, "http://www.example.com/", service.get_script_handler("groovy")
        )

        entry = await service.get_one(user, path)

        assert path == "www.example.com/TestRunner.groovy"
        assert entry.description == "Quick test for http://www.example.com/"
        assert entry.properties == {"targetHosts": "www.example.com"}
        assert "request.GET('http://www.example.com/', params)" in entry.content

    @pytest.mark.asyncio
    async def test_project_quick_test(self, service, user):
        """프로젝트 퀵 테스트"""
        path = await service.prepare_new_entry_for_quick_test(
            user, "http://my-shop.com/cart", service.get_script_handler("groovy_maven")
        )

        assert path == "my_shop.com/cart/src/main/java/TestRunner.groovy"
        assert await service.has_file_entry(user, path) is True
        assert await service.has_file_entry(user, "my_shop.com/cart/pom.xml") is True

    @pytest.mark.asyncio
    async def test_invalid_url(self, service, user):
        """잘못된 URL"""
        with pytest.raises(FileEntryException):
            await service.prepare_new_entry_for_quick_test(
                user, "no-scheme", service.get_script_handler("groovy")
            )


class TestHarConversion:
    """HAR 변환 테스트"""

    def test_convert_to_script(self, service, sample_har):
        """Groovy / Jython 스크립트 생성"""
        scripts = service.convert_to_script(sample_har, True)

        assert set(scripts) == {"groovy", "jython"}
        assert "test2 = new GTest(2, 'POST http://example.com/login')" in scripts["groovy"]
        assert "logo.png" not in scripts["groovy"]
        assert "def page2(self):" in scripts["jython"]

    def test_convert_keeps_static_resources(self, service, sample_har):
        """정적 리소스 유지"""
        scripts = service.convert_to_script(sample_har, False)

        assert "logo.png" in scripts["jython"]

    def test_load_har(self, service, sample_har):
        """HAR 로드"""
        assert '"entries"' in service.load_har(sample_har.encode("utf-8"), True)
