"""
운영 관리 모듈

시스템 공지사항 같은 관리자용 운영 기능을 제공합니다.
"""

from .announcement import AnnouncementService

__all__ = ["AnnouncementService"]
