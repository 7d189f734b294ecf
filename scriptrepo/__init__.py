"""
스크립트 저장소 시스템

사용자별 버전 관리 스크립트 저장소와 HAR 기반 스크립트 생성을 제공합니다.
"""

__version__ = "1.0.0"
