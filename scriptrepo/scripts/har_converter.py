"""
HAR 변환 모듈

브라우저가 기록한 HAR 문서를 파싱하고 정리하여
스크립트 템플릿 파라미터로 변환합니다.
"""

import json
from typing import IO, Any, Iterable, Optional, Union

from pydantic import ValidationError

from ..exceptions import HarParseException
from ..models.har import Har, HarEntry, HarHeader, Request
from ..utils.logging import get_logger

logger = get_logger(__name__)

# 공통 헤더와 요청별 헤더에서 제외되는 헤더
IGNORED_HEADERS = ("Host",)

# 정적 리소스가 아닌 것으로 간주하는 응답 Content-Type 접두사
RECORDABLE_CONTENT_TYPES = ("text", "application")


def parse_har(content: Union[str, bytes]) -> Har:
    """
    HAR JSON 파싱

    Args:
        content: HAR 문서 텍스트

    Returns:
        Har: 파싱된 HAR

    Raises:
        HarParseException: JSON 형식이 아니거나 HAR 구조가 아닐 때
    """
    try:
        return Har.model_validate_json(content)
    except ValidationError as e:
        raise HarParseException(f"올바른 HAR 문서가 아닙니다 ({e.error_count()}개 오류)") from e
    except ValueError as e:
        raise HarParseException(str(e)) from e


def headers_to_dict(headers: Iterable[HarHeader]) -> dict[str, str]:
    """헤더 목록을 매핑으로 변환 (중복 이름은 뒤의 값이 남음)"""
    return {header.name: header.value for header in headers}


def ignore_headers(headers: dict[str, str], ignores: Iterable[str] = IGNORED_HEADERS) -> dict[str, str]:
    """무시 목록에 있는 헤더 제거"""
    for ignore in ignores:
        headers.pop(ignore, None)
    return headers


def is_recordable(entry: HarEntry) -> bool:
    """응답 Content-Type 이 text 나 application 으로 시작하는지 확인"""
    return any(
        header.name == "Content-Type" and header.value.startswith(RECORDABLE_CONTENT_TYPES)
        for header in entry.response.headers
    )


def clean_static_resources(har: Har) -> Har:
    """
    정적 리소스 엔트리 제거

    이미지, 폰트 등 Content-Type 이 text/application 이 아닌 응답을 버립니다.
    원본 HAR 은 변경하지 않습니다.

    Args:
        har: 원본 HAR

    Returns:
        Har: 정리된 HAR
    """
    entries = [entry for entry in har.log.entries if is_recordable(entry)]
    log = har.log.model_copy(update={"entries": entries})
    logger.debug(f"정적 리소스 정리: {len(har.log.entries)} -> {len(entries)}")
    return har.model_copy(update={"log": log})


def extract_common_header(har: Har) -> dict[str, str]:
    """
    모든 엔트리에 같은 값으로 존재하는 요청 헤더 추출

    첫 번째 엔트리의 헤더로 시작해 이후 엔트리마다 이름과 값이 모두 같은
    헤더만 남깁니다. 엔트리가 없으면 빈 매핑을 반환합니다.

    Args:
        har: HAR 문서

    Returns:
        공통 헤더 매핑
    """
    common: Optional[dict[str, str]] = None
    for entry in har.log.entries:
        headers = headers_to_dict(entry.request.headers)
        if common is None:
            common = headers
        else:
            common = {
                name: value
                for name, value in common.items()
                if name in headers and headers[name] == value
            }
    return common or {}


def to_request(entry: HarEntry, ignores: Iterable[str] = IGNORED_HEADERS) -> Request:
    """HAR 엔트리를 템플릿용 요청으로 변환"""
    post_data = None
    if entry.request.post_data is not None and entry.request.post_data.params is not None:
        post_data = {param.name: param.value for param in entry.request.post_data.params}

    return Request(
        method=entry.request.method,
        url=entry.request.url,
        state=entry.response.status,
        headers=ignore_headers(headers_to_dict(entry.request.headers), ignores),
        post_data=post_data
    )


def get_har_param(content: Union[str, bytes], remove_static_resource: bool) -> dict[str, Any]:
    """
    HAR 문서로부터 스크립트 템플릿 파라미터 생성

    Args:
        content: HAR 문서 텍스트
        remove_static_resource: 정적 리소스 제거 여부

    Returns:
        {"requests": [Request, ...], "commonHeader": {...}}
    """
    har = parse_har(content)
    if remove_static_resource:
        har = clean_static_resources(har)

    common_header = ignore_headers(extract_common_header(har))
    requests = [to_request(entry) for entry in har.log.entries]

    logger.info(f"HAR 변환: 요청 {len(requests)}개, 공통 헤더 {len(common_header)}개")
    return {"requests": requests, "commonHeader": common_header}


def dump_har(har: Har) -> str:
    """HAR 을 보기 좋게 들여쓴 JSON 텍스트로 변환"""
    return json.dumps(
        har.model_dump(mode="json", by_alias=True, exclude_none=True),
        indent=2,
        ensure_ascii=False
    )


def load_har(source: Union[str, bytes, IO], remove_static_resource: bool) -> str:
    """
    업로드된 HAR 을 읽어 (선택적으로 정리한 뒤) JSON 텍스트로 반환

    Args:
        source: HAR 텍스트, 바이트 또는 파일 객체
        remove_static_resource: 정적 리소스 제거 여부

    Returns:
        들여쓰기 된 HAR JSON 텍스트

    Raises:
        HarParseException: 읽기 또는 파싱에 실패했을 때
    """
    if hasattr(source, "read"):
        try:
            source = source.read()
        except OSError as e:
            raise HarParseException(f"HAR 파일 읽기 실패: {e}") from e

    har = parse_har(source)
    if remove_static_resource:
        har = clean_static_resources(har)
    return dump_har(har)
