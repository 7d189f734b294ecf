"""
공지사항 관리 모듈

시스템 공지사항을 UTF-8 텍스트 파일로 저장하고 조회합니다.
"""

import threading
from pathlib import Path

from ..utils.logging import get_logger

logger = get_logger(__name__)


class AnnouncementService:
    """시스템 공지사항 서비스"""

    def __init__(self, settings):
        """
        공지사항 서비스 초기화

        Args:
            settings: 시스템 설정
        """
        self.settings = settings
        self.logger = logger
        self.announcement_file = Path(settings.announcement_file)
        self._lock = threading.Lock()

    def get_announcement(self) -> str:
        """
        공지사항 조회

        Returns:
            공지사항 내용 (없으면 빈 문자열)
        """
        with self._lock:
            if not self.announcement_file.exists():
                return ""
            try:
                return self.announcement_file.read_text(encoding="utf-8")
            except OSError as e:
                self.logger.error(f"공지사항 읽기 실패: {self.announcement_file} - {e}")
                return ""

    def save_announcement(self, content: str) -> bool:
        """
        공지사항 저장

        Args:
            content: 공지사항 내용

        Returns:
            저장 성공 여부
        """
        with self._lock:
            try:
                self.announcement_file.parent.mkdir(parents=True, exist_ok=True)
                self.announcement_file.write_text(content or "", encoding="utf-8")
            except OSError as e:
                self.logger.error(f"공지사항 저장 실패: {self.announcement_file} - {e}")
                return False

        self.logger.info(f"공지사항 저장 완료 ({len(content or '')}자)")
        return True
