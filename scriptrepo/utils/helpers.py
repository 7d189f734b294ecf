"""
공통 유틸리티 함수 모듈

경로/URL 처리와 재시도 같은 공통 헬퍼 함수들을 제공합니다.
"""

import asyncio
import re
from typing import Any, Callable
from urllib.parse import urlsplit

from ..exceptions import FileEntryException
from ..utils.logging import get_logger

logger = get_logger(__name__)

# 퀵 테스트 경로 생성 시 '_' 로 치환되는 문자
URL_PATH_SPECIAL_CHARS = re.compile(r"[;&?%$\-#]")


def join_path(base: str, name: str) -> str:
    """
    저장소 경로 결합

    Args:
        base: 기준 경로
        name: 하위 경로 또는 파일명

    Returns:
        str: '/' 로 결합된 경로
    """
    base = (base or "").rstrip("/")
    name = (name or "").lstrip("/")
    if not base:
        return name
    if not name:
        return base
    return f"{base}/{name}"


def divide_path_and_file(path: str) -> tuple[str, str]:
    """
    경로를 상위 디렉토리와 마지막 이름으로 분리

    Args:
        path: 저장소 경로

    Returns:
        (상위 경로, 파일명) 튜플. '/' 가 없으면 상위 경로는 빈 문자열
    """
    index = path.rfind("/")
    if index == -1:
        return "", path
    return path[:index], path[index + 1:]


def get_host(url: str) -> str:
    """
    URL 의 호스트 이름 추출

    Args:
        url: 대상 URL

    Returns:
        str: 호스트 이름 (해석할 수 없으면 빈 문자열)
    """
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""



def get_target_hosts(url: str, placeholder_url: str) -> dict[str, str]:
    """
    스크립트 엔트리의 대상 호스트 속성

    Args:
        url: 대상 URL
        placeholder_url: 사용자가 고쳐 써야 하는 자리표시 URL

    Returns:
        dict: {"targetHosts": 호스트} (자리표시 URL 이거나 호스트가 없으면 빈 dict)
    """
    if url == placeholder_url:
        return {}
    host = get_host(url)
    return {"targetHosts": host} if host else {}


def get_path_from_url(url: str) -> str:
    """
    URL 로부터 퀵 테스트 스크립트 경로 생성

    호스트와 경로를 이어 붙인 뒤 특수 문자(;&?%$-#)를 '_' 로 치환합니다.
    쿼리 문자열과 프래그먼트는 포함되지 않습니다.

    Args:
        url: 대상 URL

    Returns:
        str: 저장소 경로

    Raises:
        FileEntryException: URL 을 해석할 수 없을 때
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError as e:
        raise FileEntryException("URL 경로 변환", url, str(e)) from e

    if not parts.scheme or not host:
        raise FileEntryException("URL 경로 변환", url, "올바른 URL 형식이 아닙니다")

    url_path = "" if parts.path == "/" else parts.path
    return URL_PATH_SPECIAL_CHARS.sub("_", host + url_path)


async def retry_with_backoff(
    func: Callable,
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    exceptions: tuple = (Exception,)
) -> Any:
    """
    지수 백오프를 사용한 재시도 함수

    backoff_factor 를 1 로 주면 고정 간격 재시도가 됩니다.

    Args:
        func: 재시도할 함수 (동기 또는 코루틴 함수)
        max_retries: 최대 재시도 횟수
        initial_delay: 초기 지연 시간 (초)
        backoff_factor: 백오프 배수
        max_delay: 최대 지연 시간 (초)
        exceptions: 재시도할 예외 타입들

    Returns:
        Any: 함수 실행 결과

    Raises:
        Exception: 모든 재시도 실패 시 마지막 예외
    """
    for attempt in range(max_retries + 1):
        try:
            if asyncio.iscoroutinefunction(func):
                return await func()
            return func()
        except exceptions as e:
            if attempt == max_retries:
                logger.error(f"재시도 {max_retries}회 모두 실패: {e}")
                raise

            delay = min(initial_delay * (backoff_factor ** attempt), max_delay)
            logger.warning(f"재시도 {attempt + 1}/{max_retries} 실패, {delay:.1f}초 후 재시도: {e}")
            await asyncio.sleep(delay)

    raise RuntimeError("max_retries 는 0 이상이어야 합니다")
