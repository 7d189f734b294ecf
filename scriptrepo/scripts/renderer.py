"""
스크립트 템플릿 렌더링 모듈

Jinja2 로 스크립트 템플릿을 렌더링합니다. 설정에 사용자 템플릿 디렉토리가
지정되면 내장 템플릿보다 먼저 검색합니다.
"""

from typing import Any, Mapping

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    TemplateError,
    TemplateNotFound,
)

from ..exceptions import TemplateRenderException
from ..utils.logging import get_logger

logger = get_logger(__name__)


def quote_literal(value: Any) -> str:
    """
    Groovy/Python 공용 작은따옴표 문자열 리터럴 생성

    Groovy 의 큰따옴표 문자열은 '$' 를 보간하므로 작은따옴표를 사용합니다.
    """
    text = "" if value is None else str(value)
    text = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )
    return f"'{text}'"


class TemplateRenderer:
    """Jinja2 기반 템플릿 렌더러"""

    def __init__(self, settings):
        """
        템플릿 렌더러 초기화

        Args:
            settings: 시스템 설정
        """
        loaders = []
        if settings.template_dir:
            loaders.append(FileSystemLoader(settings.template_dir))
        loaders.append(PackageLoader("scriptrepo.scripts", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False
        )
        self.env.filters["quote"] = quote_literal

    def render(self, template_key: str, params: Mapping[str, Any]) -> str:
        """
        템플릿 렌더링

        Args:
            template_key: 템플릿 경로 (예: groovy/basic_template.groovy.j2)
            params: 템플릿 파라미터

        Returns:
            렌더링된 텍스트

        Raises:
            TemplateRenderException: 템플릿이 없거나 렌더링에 실패했을 때
        """
        try:
            template = self.env.get_template(template_key)
            return template.render(**params)
        except TemplateNotFound as e:
            raise TemplateRenderException(template_key, f"템플릿을 찾을 수 없습니다: {e}") from e
        except TemplateError as e:
            logger.error(f"템플릿 렌더링 오류: {template_key} - {e}")
            raise TemplateRenderException(template_key, str(e)) from e
