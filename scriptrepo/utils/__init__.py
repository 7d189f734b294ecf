"""
유틸리티 패키지

공통으로 사용되는 유틸리티 함수들을 포함합니다.
"""

from .logging import get_logger, setup_logging
from .helpers import (
    divide_path_and_file,
    get_host,
    get_path_from_url,
    get_target_hosts,
    join_path,
    retry_with_backoff,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "join_path",
    "divide_path_and_file",
    "get_host",
    "get_path_from_url",
    "get_target_hosts",
    "retry_with_backoff",
]
