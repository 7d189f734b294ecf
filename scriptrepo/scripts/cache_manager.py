"""
캐시 관리 모듈

이름으로 구분되는 메모리 캐시 영역(region)을 관리합니다.
각 영역은 TTL 이 있는 cachetools 캐시이며 키 단위 조회/저장/무효화만 제공합니다.
무효화마다 키의 세대가 바뀌므로, 조회 전에 받아 둔 세대로 저장하면
그 사이에 무효화된 오래된 값은 저장되지 않습니다.
"""

import threading
from typing import Any, Hashable, Optional

from cachetools import TTLCache

from ..utils.logging import get_logger

logger = get_logger(__name__)

# 파일 엔트리 목록 캐시 영역 이름
FILE_ENTRY_CACHE = "file_entries"


class Cache:
    """단일 캐시 영역"""

    def __init__(self, name: str, max_size: int, ttl: float):
        """
        캐시 영역 초기화

        Args:
            name: 영역 이름
            max_size: 최대 항목 수
            ttl: 항목 유지 시간 (초)
        """
        self.name = name
        self._store: TTLCache = TTLCache(maxsize=max_size, ttl=ttl)
        self._lock = threading.Lock()
        self._generations: dict[Hashable, int] = {}
        self._epoch = 0
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> Optional[Any]:
        """캐시 조회 (없으면 None)"""
        with self._lock:
            value = self._store.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
            return value

    def generation(self, key: Hashable) -> tuple[int, int]:
        """키의 현재 세대"""
        with self._lock:
            return self._epoch, self._generations.get(key, 0)

    def put(self, key: Hashable, value: Any, generation: Optional[tuple[int, int]] = None) -> bool:
        """
        캐시 저장

        Args:
            key: 키
            value: 값
            generation: 조회 전에 받아 둔 세대 (다르면 저장하지 않음)

        Returns:
            bool: 저장 여부
        """
        with self._lock:
            if generation is not None and generation != (self._epoch, self._generations.get(key, 0)):
                return False
            self._store[key] = value
            return True

    def evict(self, key: Hashable) -> None:
        """키 단위 무효화"""
        with self._lock:
            self._store.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug(f"캐시 무효화: {self.name}[{key}]")

    def clear(self) -> None:
        """영역 전체 무효화"""
        with self._lock:
            self._store.clear()
            self._epoch += 1
        logger.info(f"캐시 영역 초기화: {self.name}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class CacheManager:
    """캐시 영역 관리자"""

    def __init__(self, settings):
        """
        캐시 매니저 초기화

        Args:
            settings: 시스템 설정
        """
        self.settings = settings
        self.logger = logger
        self._caches: dict[str, Cache] = {}
        self._lock = threading.Lock()

    def get_cache(self, name: str) -> Cache:
        """
        이름에 해당하는 캐시 영역 반환 (없으면 생성)

        Args:
            name: 영역 이름

        Returns:
            캐시 영역
        """
        with self._lock:
            cache = self._caches.get(name)
            if cache is None:
                cache = Cache(
                    name,
                    max_size=self.settings.file_entry_cache_max_size,
                    ttl=self.settings.file_entry_cache_ttl
                )
                self._caches[name] = cache
                self.logger.info(f"캐시 영역 생성: {name}")
            return cache

    def get_cache_stats(self) -> dict:
        """
        캐시 통계 정보 조회

        Returns:
            영역별 항목 수와 적중/실패 횟수
        """
        with self._lock:
            caches = list(self._caches.values())

        return {
            cache.name: {
                'size': len(cache),
                'hits': cache.hits,
                'misses': cache.misses
            }
            for cache in caches
        }
