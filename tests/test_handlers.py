"""
스크립트 핸들러와 템플릿 렌더러 테스트
"""

import ast

import pytest

from scriptrepo.config.settings import Settings
from scriptrepo.exceptions import ScriptHandlerNotFoundException, TemplateRenderException
from scriptrepo.models.base import FileEntry
from scriptrepo.models.enums import FileType
from scriptrepo.models.har import Request
from scriptrepo.scripts.handlers import (
    GroovyMavenProjectScriptHandler,
    GroovyScriptHandler,
    JythonScriptHandler,
    ScriptHandlerFactory,
)
from scriptrepo.scripts.renderer import TemplateRenderer, quote_literal


@pytest.fixture
def renderer(settings):
    return TemplateRenderer(settings)


@pytest.fixture
def factory(renderer, repository):
    return ScriptHandlerFactory(renderer, repository)


@pytest.fixture
def har_params():
    """HAR 변환 결과 형태의 템플릿 파라미터"""
    return {
        "requests": [
            Request(method="GET", url="http://example.com/", state=200,
                    headers={"Accept": "text/html"}),
            Request(method="POST", url="http://example.com/login", state=302,
                    headers={"X-Token": "second"},
                    post_data={"user": "kim", "password": "it's secret"}),
        ],
        "commonHeader": {"User-Agent": "Mozilla/5.0"},
    }


class TestQuoteLiteral:
    """문자열 리터럴 필터 테스트"""

    def test_escapes(self):
        """따옴표, 역슬래시, 개행 이스케이프"""
        assert quote_literal("it's") == "'it\\'s'"
        assert quote_literal("a\\b") == "'a\\\\b'"
        assert quote_literal("a\nb") == "'a\\nb'"
        assert quote_literal(None) == "''"

    def test_result_is_python_literal(self):
        """파이썬 리터럴로 해석 가능"""
        value = "quote ' and \\ and \n and $var"
        assert ast.literal_eval(quote_literal(value)) == value


class TestTemplateRenderer:
    """템플릿 렌더러 테스트"""

    def test_missing_template(self, renderer):
        """없는 템플릿"""
        with pytest.raises(TemplateRenderException):
            renderer.render("ruby/none.rb.j2", {})

    def test_custom_template_dir_overrides(self, tmp_path):
        """사용자 템플릿 디렉토리가 우선"""
        (tmp_path / "groovy").mkdir()
        (tmp_path / "groovy" / "basic_template.groovy.j2").write_text("custom {{ name }}")
        renderer = TemplateRenderer(Settings(template_dir=str(tmp_path)))

        assert renderer.render("groovy/basic_template.groovy.j2", {"name": "x"}) == "custom x"
        assert "<project" in renderer.render("groovy_maven/pom.xml.j2", {"name": "x", "url": "u"})


class TestScriptHandlers:
    """스크립트 핸들러 테스트"""

    def test_groovy_quick_test_template(self, factory):
        """URL 기반 Groovy 템플릿"""
        script = factory.get_handler("groovy").get_script_template({
            "url": "http://example.com/",
            "userName": "테스터",
            "name": "example.com",
            "options": None,
        })

        assert "request.GET('http://example.com/', params)" in script
        assert "new GTest(1, 'example.com')" in script
        assert "@author 테스터" in script
        assert "Map<String, String> headers = [:]" in script

    def test_groovy_har_template(self, factory, har_params):
        """HAR 기반 Groovy 템플릿"""
        script = factory.get_handler("groovy").get_script_template(har_params)

        assert "headers = ['User-Agent': 'Mozilla/5.0']" in script
        assert "test2 = new GTest(2, 'POST http://example.com/login')" in script
        assert "'password': 'it\\'s secret'" in script
        assert "request.POST('http://example.com/login', body)" in script
        assert "assertThat(response.statusCode, is(302))" in script
        assert script.count("@Test") == 2

    def test_jython_templates_are_valid_python(self, factory, har_params):
        """Jython 템플릿은 파이썬 문법으로 해석 가능"""
        handler = factory.get_handler("jython")
        quick = handler.get_script_template({"url": "http://example.com", "userName": "u", "name": "n"})
        recorded = handler.get_script_template(har_params)

        ast.parse(quick)
        ast.parse(recorded)
        assert "def page2(self):" in recorded
        assert "NVPair('password', 'it\\'s secret')" in recorded
        assert handler.check_syntax_errors(recorded) is None

    def test_jython_syntax_error(self, factory):
        """Jython 문법 오류 검출"""
        error = factory.get_handler("jython").check_syntax_errors("def broken(:\n    pass\n")

        assert error is not None
        assert "1번째 줄" in error

    def test_groovy_has_no_syntax_checker(self, factory):
        """Groovy 는 문법 검사 없음"""
        assert factory.get_handler("groovy").check_syntax_errors("def (") is None

    def test_quick_test_paths(self, factory):
        """퀵 테스트 기본 경로"""
        assert factory.get_handler("groovy").get_default_quick_test_file_path("example.com") == \
            "example.com/TestRunner.groovy"
        assert factory.get_handler("jython").get_default_quick_test_file_path("example.com") == \
            "example.com/TestRunner.py"
        assert factory.get_handler("groovy_maven").get_default_quick_test_file_path("example.com") == \
            "example.com/src/main/java/TestRunner.groovy"


class TestScriptHandlerFactory:
    """핸들러 등록소 테스트"""

    def test_ordered_by_priority(self, factory):
        """order 순 정렬"""
        assert [handler.key for handler in factory.handlers] == ["groovy_maven", "groovy", "jython"]

    def test_get_handler_unknown(self, factory):
        """등록되지 않은 키"""
        with pytest.raises(ScriptHandlerNotFoundException):
            factory.get_handler("ruby")

    @pytest.mark.parametrize("path, expected", [
        ("perf/test.groovy", GroovyScriptHandler),
        ("perf/test.py", JythonScriptHandler),
        ("proj/src/main/java/TestRunner.groovy", GroovyMavenProjectScriptHandler),
    ])
    def test_handler_for_entry(self, factory, path, expected):
        """엔트리 경로로 핸들러 선택"""
        assert type(factory.get_handler_for_entry(FileEntry(path=path))) is expected

    def test_no_handler_for_entry(self, factory):
        """처리 가능한 핸들러 없음"""
        assert factory.get_handler_for_entry(FileEntry(path="readme.txt")) is None
        assert factory.get_handler_for_entry(FileEntry(path="dir.py", file_type=FileType.DIR)) is None
