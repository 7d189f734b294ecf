"""
데이터 모델 테스트
"""

import pytest
from pydantic import ValidationError

from scriptrepo.models.base import FileEntry, User
from scriptrepo.models.enums import FileType, Role
from scriptrepo.models.har import Har, Request


class TestUser:
    """사용자 모델 테스트"""

    def test_default_role(self):
        """기본 권한은 일반 사용자"""
        user = User(user_id="kim", user_name="김")

        assert user.role == Role.USER
        assert user.role.value == "U"

    def test_empty_user_id(self):
        """빈 사용자 ID 거부"""
        with pytest.raises(ValidationError):
            User(user_id="", user_name="빈 사용자")


class TestFileEntry:
    """파일 엔트리 모델 테스트"""

    def test_defaults(self):
        """기본값"""
        entry = FileEntry()

        assert entry.path == ""
        assert entry.file_type == FileType.FILE
        assert entry.properties == {}
        assert entry.content is None
        assert entry.file_size == 0

    def test_file_name_and_extension(self):
        """파일 이름과 확장자"""
        entry = FileEntry(path="perf/login/TestRunner.Groovy")

        assert entry.file_name == "TestRunner.Groovy"
        assert entry.extension == "groovy"

    def test_no_extension(self):
        """확장자 없는 파일"""
        assert FileEntry(path="lib/README").extension == ""

    def test_negative_size(self):
        """음수 크기 거부"""
        with pytest.raises(ValidationError):
            FileEntry(path="a.py", file_size=-1)


class TestHarModel:
    """HAR 모델 테스트"""

    def test_parse_aliases(self, sample_har_dict):
        """postData 별칭 파싱"""
        har = Har.model_validate(sample_har_dict)

        post = har.log.entries[1].request
        assert post.method == "POST"
        assert post.post_data.mime_type == "application/x-www-form-urlencoded"
        assert [param.name for param in post.post_data.params] == ["user", "password"]

    def test_extra_fields_preserved(self, sample_har_dict):
        """알 수 없는 필드 보존"""
        har = Har.model_validate(sample_har_dict)
        dumped = har.model_dump(by_alias=True, exclude_none=True)

        assert dumped["log"]["version"] == "1.2"
        assert dumped["log"]["entries"][0]["request"]["httpVersion"] == "HTTP/1.1"
        assert "postData" in dumped["log"]["entries"][1]["request"]

    def test_request_defaults(self):
        """템플릿 요청 기본값"""
        request = Request(method="GET", url="http://example.com")

        assert request.state == 0
        assert request.headers == {}
        assert request.post_data is None
