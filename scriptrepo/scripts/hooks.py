"""
저장소 훅 모듈

저장소 커밋 이벤트를 구독자에게 전달하는 이벤트 구독 인터페이스를 제공합니다.
"""

import threading
from dataclasses import dataclass
from typing import Callable

from ..models.enums import HookType
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class HookEvent:
    """저장소 훅 이벤트"""

    hook_type: HookType
    repository_name: str
    revision: int


HookCallback = Callable[[HookEvent], None]


class HookRegistry:
    """훅 타입별 콜백 등록소"""

    def __init__(self):
        self._callbacks: dict[HookType, list[HookCallback]] = {}
        self._lock = threading.Lock()

    def subscribe(self, hook_type: HookType, callback: HookCallback) -> None:
        """
        훅 콜백 등록

        Args:
            hook_type: 구독할 훅 타입
            callback: 이벤트 발생 시 호출될 함수
        """
        with self._lock:
            self._callbacks.setdefault(hook_type, []).append(callback)

    def unsubscribe(self, hook_type: HookType, callback: HookCallback) -> None:
        """훅 콜백 해제"""
        with self._lock:
            callbacks = self._callbacks.get(hook_type, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def fire(self, event: HookEvent) -> None:
        """
        이벤트 발행

        구독자 오류는 로그로 남기고 다음 구독자로 진행합니다.
        커밋은 이미 완료된 상태이므로 호출자에게 전파하지 않습니다.

        Args:
            event: 발행할 훅 이벤트
        """
        with self._lock:
            callbacks = list(self._callbacks.get(event.hook_type, []))

        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"훅 처리 실패: {event.hook_type.value} "
                    f"({event.repository_name} r{event.revision}) - {e}"
                )
