"""처리한 이벤트 추적

Slack 이벤트는 재전송(at-least-once)될 수 있으므로, 같은 이벤트로
티켓이 두 번 만들어지지 않도록 처리한 이벤트 키를 인메모리 집합으로 관리합니다.

프로세스 수명 동안만 유지되며 만료는 없습니다.
"""

import logging
import threading

logger = logging.getLogger(__name__)


def event_key(event: dict) -> str:
    """이벤트 중복 판별 키 ("채널:ts")"""
    return f"{event.get('channel', '')}:{event.get('ts', '')}"


class EventDedupGuard:
    """처리한 이벤트 키를 기록하는 check-and-set 가드"""

    def __init__(self):
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def should_process(self, key: str) -> bool:
        """처음 보는 키면 기록 후 True, 이미 본 키면 False

        확인과 기록이 하나의 락 안에서 이루어지므로 동시에 도착한 재전송 중
        하나만 True를 받습니다.
        """
        with self._lock:
            if key in self._seen:
                logger.debug(f"중복 이벤트 스킵: {key}")
                return False
            self._seen.add(key)
            return True

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
