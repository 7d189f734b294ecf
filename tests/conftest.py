"""
공통 테스트 픽스처

임시 디렉토리에 실제 Git 저장소를 만들어 테스트합니다.
"""

import json

import pytest

from scriptrepo.config.settings import Settings
from scriptrepo.models.base import User
from scriptrepo.scripts.file_entry_service import FileEntryService
from scriptrepo.scripts.repository import GitFileEntryRepository


@pytest.fixture
def settings(tmp_path):
    """임시 디렉토리를 사용하는 설정"""
    return Settings(
        repository_root_dir=str(tmp_path / "repos"),
        announcement_file=str(tmp_path / "home" / "announcement.conf"),
        file_entry_retry_delay=0.0,
        provision_max_workers=2,
        jwt_secret_key="test-secret-key",
        log_file=None
    )


@pytest.fixture
def user():
    """일반 사용자"""
    return User(user_id="tester", user_name="테스터")


@pytest.fixture
def repository(settings):
    """파일 엔트리 저장소"""
    return GitFileEntryRepository(settings)


@pytest.fixture
def user_repository(repository, user):
    """사용자 저장소가 생성된 파일 엔트리 저장소"""
    repository.create_repository(repository.get_user_repo_directory(user), user.user_id)
    return repository


@pytest.fixture
def service(settings):
    """파일 엔트리 서비스"""
    file_entry_service = FileEntryService(settings)
    yield file_entry_service
    file_entry_service.shutdown()


def _entry(method, url, request_headers, content_type, status, params=None):
    request = {
        "method": method,
        "url": url,
        "httpVersion": "HTTP/1.1",
        "headers": [{"name": name, "value": value} for name, value in request_headers],
    }
    if params is not None:
        request["postData"] = {
            "mimeType": "application/x-www-form-urlencoded",
            "params": [{"name": name, "value": value} for name, value in params],
        }
    return {
        "startedDateTime": "2024-01-01T00:00:00.000Z",
        "request": request,
        "response": {
            "status": status,
            "headers": [{"name": "Content-Type", "value": content_type}],
        },
    }


@pytest.fixture
def sample_har_dict():
    """
    HAR 샘플

    - 1번: HTML 페이지 (GET)
    - 2번: 로그인 폼 전송 (POST, 302)
    - 3번: 이미지 (정적 리소스)
    """
    return {
        "log": {
            "version": "1.2",
            "creator": {"name": "browser", "version": "1.0"},
            "entries": [
                _entry(
                    "GET", "http://example.com/",
                    [("Host", "example.com"), ("User-Agent", "Mozilla/5.0"), ("Accept", "text/html")],
                    "text/html; charset=utf-8", 200
                ),
                _entry(
                    "POST", "http://example.com/login",
                    [("Host", "example.com"), ("User-Agent", "Mozilla/5.0"), ("Accept", "*/*"),
                     ("X-Token", "first"), ("X-Token", "second")],
                    "application/json", 302,
                    params=[("user", "kim"), ("password", "it's secret")]
                ),
                _entry(
                    "GET", "http://example.com/logo.png",
                    [("Host", "example.com"), ("User-Agent", "Mozilla/5.0")],
                    "image/png", 200
                ),
            ],
        }
    }


@pytest.fixture
def sample_har(sample_har_dict):
    """HAR 샘플 텍스트"""
    return json.dumps(sample_har_dict)
