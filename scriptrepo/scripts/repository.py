"""
사용자 스크립트 저장소 모듈

GitPython 을 이용해 사용자별 Git 저장소에 파일 엔트리를 버전 관리합니다.

리비전은 정수로 표현합니다. 저장소 생성 커밋이 리비전 0 이며
이후 first-parent 커밋마다 1씩 증가합니다. None 또는 -1 은 HEAD 를 뜻합니다.
"""

import json
import shutil
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional

import git
from git.exc import GitCommandError, GitError, InvalidGitRepositoryError, NoSuchPathError

from ..exceptions import FileEntryException, RepositoryProvisionException
from ..models.base import FileEntry, User
from ..models.enums import FileType, HookType
from ..utils.logging import get_logger
from .hooks import HookEvent, HookRegistry

logger = get_logger(__name__)

# 인코딩과 속성을 보관하는 숨김 디렉토리
META_DIR = ".meta"
# 빈 디렉토리를 유지하기 위한 파일
KEEP_FILE = ".gitkeep"

HEAD_REVISION = -1


class GitFileEntryRepository:
    """Git 기반 파일 엔트리 저장소"""

    def __init__(self, settings):
        """
        파일 엔트리 저장소 초기화

        Args:
            settings: 시스템 설정
        """
        self.settings = settings
        self.logger = logger
        self.root_dir = Path(settings.repository_root_dir)
        self.hooks = HookRegistry()

        # 저장소별 쓰기 직렬화
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

        self.root_dir.mkdir(parents=True, exist_ok=True)

    def get_user_repo_directory(self, user: User) -> Path:
        """사용자 저장소 디렉토리"""
        return self.root_dir / user.user_id

    def create_repository(self, directory: Path, principal: str) -> git.Repo:
        """
        새 저장소 생성

        빈 트리의 최초 커밋(리비전 0)을 만들어 HEAD 가 항상 존재하도록 합니다.
        최초 커밋까지 끝나지 않으면 이번 호출에서 만든 디렉토리를 지웁니다.

        Args:
            directory: 저장소 디렉토리
            principal: 저장소 소유자 (커밋 작성자)

        Returns:
            생성된 저장소

        Raises:
            RepositoryProvisionException: 초기화 또는 최초 커밋 실패 시
        """
        created = not directory.exists()
        try:
            directory.mkdir(parents=True, exist_ok=True)
            repo = git.Repo.init(directory)

            with repo.config_writer() as config:
                config.set_value("user", "name", principal)
                config.set_value("user", "email", self._email_of(principal))

            actor = git.Actor(principal, self._email_of(principal))
            repo.index.commit("저장소 생성", author=actor, committer=actor)
        except (OSError, GitError, ValueError) as e:
            if created:
                shutil.rmtree(directory, ignore_errors=True)
            raise RepositoryProvisionException(principal, str(e)) from e

        self.logger.info(f"저장소 생성 완료: {directory}")
        return repo

    def has_repository(self, user: User) -> bool:
        """최초 커밋까지 끝난 사용자 저장소가 있는지 확인"""
        try:
            return git.Repo(self.get_user_repo_directory(user)).head.is_valid()
        except (NoSuchPathError, InvalidGitRepositoryError):
            return False

    def find_all(
        self,
        user: User,
        path: Optional[str] = None,
        revision: Optional[int] = None
    ) -> list[FileEntry]:
        """
        파일 엔트리 목록 조회 (내용 제외)

        path 가 None 이면 HEAD 의 전체 엔트리를 재귀적으로,
        지정되면 해당 디렉토리의 바로 아래 엔트리만 반환합니다.

        Args:
            user: 사용자
            path: 디렉토리 경로 (선택사항)
            revision: 리비전 (None 또는 -1 이면 HEAD)

        Returns:
            경로 순으로 정렬된 파일 엔트리 목록
        """
        repo = self._open(user)
        with self._read_errors("목록 조회", path):
            commit = self._resolve_commit(repo, revision)
            current_revision = self._revision_of(repo, commit)

            if path is None:
                items: Iterable = commit.tree.traverse()
            else:
                path = self._normalize(path)
                try:
                    target = commit.tree / path if path else commit.tree
                except KeyError:
                    return []
                if target.type == "blob":
                    items = [target]
                else:
                    items = list(target.trees) + list(target.blobs)

            entries = [
                self._to_entry(repo, commit, item, current_revision, with_content=False)
                for item in items
                if not self._is_hidden(item)
            ]
        return sorted(entries, key=lambda entry: entry.path)

    def find_one(self, user: User, path: str, revision: Optional[int] = None) -> Optional[FileEntry]:
        """
        파일 엔트리 단건 조회 (내용 포함)

        Args:
            user: 사용자
            path: 파일 경로
            revision: 리비전 (None 또는 -1 이면 HEAD)

        Returns:
            파일 엔트리 (없으면 None)
        """
        path = self._normalize(path)
        if not path:
            return None

        repo = self._open(user)
        with self._read_errors("조회", path):
            commit = self._resolve_commit(repo, revision)
            try:
                item = commit.tree / path
            except KeyError:
                return None
            if self._is_hidden(item):
                return None

            return self._to_entry(repo, commit, item, self._revision_of(repo, commit), with_content=True)

    def has_one(self, user: User, path: str) -> bool:
        """HEAD 에 경로가 존재하는지 확인"""
        path = self._normalize(path)
        if not path:
            return False
        repo = self._open(user)
        with self._read_errors("존재 확인", path):
            try:
                repo.head.commit.tree / path
                return True
            except KeyError:
                return False

    def save(self, user: User, entry: FileEntry, encoding: Optional[str] = None) -> int:
        """
        파일 엔트리 저장 (생성 또는 수정)

        Args:
            user: 사용자
            entry: 저장할 엔트리
            encoding: 내용 인코딩

        Returns:
            새 리비전 번호
        """
        path = self._normalize(entry.path)
        self._check_writable_path(path)

        with self._lock_for(user):
            repo = self._open(user)
            work_dir = Path(repo.working_tree_dir)
            target = work_dir / path

            try:
                if entry.file_type == FileType.DIR:
                    target.mkdir(parents=True, exist_ok=True)
                    (target / KEEP_FILE).touch()
                    paths = [f"{path}/{KEEP_FILE}"]
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_bytes(self._encode(entry, encoding))
                    meta_path = f"{META_DIR}/{path}.json"
                    meta_file = work_dir / meta_path
                    meta_file.parent.mkdir(parents=True, exist_ok=True)
                    meta_file.write_text(
                        json.dumps(
                            {"encoding": encoding, "properties": entry.properties},
                            ensure_ascii=False,
                            indent=2
                        ),
                        encoding="utf-8"
                    )
                    paths = [path, meta_path]

                # 설명이 없으면 빈 메시지로 커밋
                repo.index.add(paths)
                commit = repo.index.commit(
                    entry.description or "",
                    author=self._actor(user),
                    committer=self._actor(user)
                )
            except (OSError, GitCommandError) as e:
                raise FileEntryException("저장", path, str(e)) from e

            revision = self._revision_of(repo, commit)

        self.logger.info(f"파일 엔트리 저장: {user.user_id}:{path} r{revision}")
        self._fire_post_commit(user, revision)
        return revision

    def delete(self, user: User, paths: list[str]) -> Optional[int]:
        """
        여러 경로를 하나의 커밋으로 삭제

        존재하지 않는 경로는 경고 로그만 남기고 건너뜁니다.

        Args:
            user: 사용자
            paths: 삭제할 경로 목록

        Returns:
            새 리비전 번호 (삭제할 대상이 없으면 None)
        """
        with self._lock_for(user):
            repo = self._open(user)
            with self._read_errors("삭제", ", ".join(paths)):
                tree = repo.head.commit.tree

            targets = []
            for each in paths:
                path = self._normalize(each)
                self._check_writable_path(path)
                try:
                    tree / path
                    targets.append(path)
                except KeyError:
                    self.logger.warning(f"삭제 대상 없음: {user.user_id}:{path}")

            if not targets:
                return None

            removals = list(targets)
            for path in targets:
                for meta_path in (f"{META_DIR}/{path}.json", f"{META_DIR}/{path}"):
                    try:
                        tree / meta_path
                        removals.append(meta_path)
                    except KeyError:
                        continue

            try:
                repo.index.remove(removals, working_tree=True, r=True)
                commit = repo.index.commit(
                    f"삭제: {', '.join(targets)}",
                    author=self._actor(user),
                    committer=self._actor(user)
                )
            except GitCommandError as e:
                raise FileEntryException("삭제", ", ".join(targets), str(e)) from e

            revision = self._revision_of(repo, commit)

        self.logger.info(f"파일 엔트리 삭제: {user.user_id}:{targets} r{revision}")
        self._fire_post_commit(user, revision)
        return revision

    def write_content_to(self, user: User, path: str, to_dir: Path) -> None:
        """
        HEAD 의 내용을 로컬 디렉토리로 내보내기

        Args:
            user: 사용자
            path: 내보낼 파일 또는 디렉토리 경로
            to_dir: 대상 디렉토리
        """
        path = self._normalize(path)
        repo = self._open(user)
        with self._read_errors("내보내기", path):
            tree = repo.head.commit.tree
        try:
            source = tree / path if path else tree
        except KeyError as e:
            raise FileEntryException("내보내기", path, "경로가 존재하지 않습니다") from e

        to_dir = Path(to_dir)
        to_dir.mkdir(parents=True, exist_ok=True)

        if source.type == "blob":
            (to_dir / source.name).write_bytes(source.data_stream.read())
            return

        prefix = f"{path}/" if path else ""
        for item in source.traverse():
            if self._is_hidden(item):
                continue
            destination = to_dir / item.path[len(prefix):]
            if item.type == "tree":
                destination.mkdir(parents=True, exist_ok=True)
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(item.data_stream.read())

    def _open(self, user: User) -> git.Repo:
        """사용자 저장소 열기"""
        directory = self.get_user_repo_directory(user)
        try:
            return git.Repo(directory)
        except (NoSuchPathError, InvalidGitRepositoryError) as e:
            raise FileEntryException("저장소 열기", str(directory), "저장소가 존재하지 않습니다") from e

    @contextmanager
    def _read_errors(self, operation: str, path: Optional[str]) -> Iterator[None]:
        """조회 중 발생한 Git 오류를 FileEntryException 으로 변환"""
        try:
            yield
        except (ValueError, GitCommandError, OSError) as e:
            raise FileEntryException(operation, path, str(e)) from e

    def _resolve_commit(self, repo: git.Repo, revision: Optional[int]) -> git.Commit:
        """정수 리비전을 커밋으로 변환"""
        if revision is None or revision == HEAD_REVISION:
            return repo.head.commit

        history = list(repo.iter_commits("HEAD", first_parent=True, reverse=True))
        if revision < 0 or revision >= len(history):
            raise FileEntryException("리비전 조회", None, f"존재하지 않는 리비전입니다: {revision}")
        return history[revision]

    def _revision_of(self, repo: git.Repo, commit: git.Commit) -> int:
        """커밋의 정수 리비전"""
        return int(repo.git.rev_list("--count", "--first-parent", commit.hexsha)) - 1

    def _to_entry(self, repo: git.Repo, commit: git.Commit, item, revision: int, with_content: bool) -> FileEntry:
        """Git 객체를 파일 엔트리로 변환"""
        entry = FileEntry(
            path=item.path,
            file_type=FileType.DIR if item.type == "tree" else FileType.FILE,
            revision=revision
        )

        last_commit = next(repo.iter_commits(commit, paths=item.path, max_count=1), None)
        if last_commit is not None:
            entry.description = last_commit.message.strip() or None
            entry.last_revision = self._revision_of(repo, last_commit)
            entry.last_modified = last_commit.committed_datetime

        if item.type == "blob":
            meta = self._read_meta(commit, item.path)
            entry.encoding = meta.get("encoding")
            entry.properties = meta.get("properties") or {}
            entry.file_size = item.size

            if with_content:
                data = item.data_stream.read()
                entry.content_bytes = data
                try:
                    entry.content = data.decode(entry.encoding or "utf-8")
                except (UnicodeDecodeError, LookupError):
                    # 바이너리 파일은 텍스트 내용을 채우지 않음
                    entry.content = None

        return entry

    def _read_meta(self, commit: git.Commit, path: str) -> dict:
        """엔트리 메타데이터 읽기"""
        try:
            blob = commit.tree / f"{META_DIR}/{path}.json"
        except KeyError:
            return {}
        try:
            return json.loads(blob.data_stream.read().decode("utf-8"))
        except ValueError as e:
            self.logger.warning(f"메타데이터 파싱 실패: {path} - {e}")
            return {}

    def _encode(self, entry: FileEntry, encoding: Optional[str]) -> bytes:
        """엔트리 내용을 바이트로 변환"""
        if entry.content is not None:
            try:
                return entry.content.encode(encoding or "utf-8")
            except LookupError as e:
                raise FileEntryException("저장", entry.path, f"지원하지 않는 인코딩: {encoding}") from e
        return entry.content_bytes or b""

    def _fire_post_commit(self, user: User, revision: int) -> None:
        """post-commit 훅 발행"""
        self.hooks.fire(HookEvent(HookType.POST_COMMIT, user.user_id, revision))

    def _lock_for(self, user: User) -> threading.RLock:
        with self._locks_guard:
            return self._locks.setdefault(user.user_id, threading.RLock())

    def _actor(self, user: User) -> git.Actor:
        return git.Actor(user.user_name or user.user_id, self._email_of(user.user_id))

    def _email_of(self, principal: str) -> str:
        return f"{principal}@{self.settings.git_author_email_domain}"

    @staticmethod
    def _normalize(path: Optional[str]) -> str:
        return (path or "").strip().strip("/")

    @staticmethod
    def _is_hidden(item) -> bool:
        return (
            item.path == META_DIR
            or item.path.startswith(f"{META_DIR}/")
            or item.name == KEEP_FILE
        )

    @staticmethod
    def _check_writable_path(path: str) -> None:
        """저장소 밖이나 숨김 영역을 가리키는 경로 거부"""
        if not path:
            raise FileEntryException("경로 검증", path, "경로가 비어 있습니다")
        parts = path.split("/")
        if ".." in parts or parts[0] == META_DIR or parts[-1] == KEEP_FILE:
            raise FileEntryException("경로 검증", path, "허용되지 않는 경로입니다")
