"""
로깅 시스템 모듈

스크립트 저장소 시스템의 한국어 통합 로깅을 제공합니다.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from ..config.settings import Settings

ROOT_LOGGER_NAME = "script_repository"

# 외부 라이브러리 로거 (과도한 디버그 출력 억제)
NOISY_LOGGERS = ("git", "git.cmd", "multipart")


class KoreanFormatter(logging.Formatter):
    """한국어 로그 메시지를 위한 커스텀 포맷터"""

    LEVEL_NAMES = {
        'DEBUG': '디버그',
        'INFO': '정보',
        'WARNING': '경고',
        'ERROR': '오류',
        'CRITICAL': '치명적'
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """
        로그 레코드를 한국어 형식으로 포맷팅

        Args:
            record: 로그 레코드

        Returns:
            str: 포맷된 로그 메시지
        """
        original_levelname = record.levelname
        record.levelname = self.LEVEL_NAMES.get(original_levelname, original_levelname)
        try:
            return super().format(record)
        finally:
            # 다른 핸들러를 위해 원래 레벨명 복원
            record.levelname = original_levelname


def setup_logging(settings: Settings) -> logging.Logger:
    """
    한국어 로깅 시스템 설정

    여러 번 호출해도 핸들러가 중복 등록되지 않습니다.

    Args:
        settings: 시스템 설정 객체

    Returns:
        logging.Logger: 설정된 루트 로거
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper()))

    # 기존 핸들러 제거 (중복 방지)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = KoreanFormatter(
        fmt=settings.log_format,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.log_file:
        log_file_path = Path(settings.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        # 로테이팅 파일 핸들러 (10MB, 5개 백업)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("로깅 시스템이 초기화되었습니다")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    시스템 로거 하위의 로거를 반환합니다

    Args:
        name: 로거 이름 (보통 __name__)

    Returns:
        logging.Logger: 로거 객체
    """
    if name.startswith("scriptrepo."):
        name = name[len("scriptrepo."):]
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class LoggerMixin:
    """로깅 기능을 제공하는 믹스인 클래스"""

    @property
    def logger(self) -> logging.Logger:
        """클래스별 로거"""
        return get_logger(self.__class__.__name__)
