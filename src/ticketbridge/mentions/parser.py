"""멘션 파싱 유틸리티

슬랙 메시지 텍스트의 사용자 멘션 토큰을 추출하고 스레드 링크를 만드는
순수 함수들을 제공합니다.
"""

import re
from typing import Iterable

# <@U123> 또는 <@U123|표시이름>
MENTION_PATTERN = re.compile(r"<@([A-Z0-9]+)(?:\|[^>]*)?>")


def find_mentions(text: str, tracked_users: Iterable[str]) -> list[str]:
    """텍스트에서 멘션된 추적 대상 ID 추출

    사용자 ID는 토큰 단위로 정확히 비교하므로 U1이 <@U12>에 매칭되지 않습니다.

    Returns:
        처음 등장한 순서대로, 중복 없는 추적 대상 ID 목록
    """
    if not text:
        return []

    tracked = set(tracked_users)
    found: list[str] = []
    for user_id in MENTION_PATTERN.findall(text):
        if user_id in tracked and user_id not in found:
            found.append(user_id)
    return found


def build_thread_link(workspace_url: str, channel_id: str, thread_ts: str) -> str:
    """채널 ID와 스레드 ts로 스레드 링크 생성

    예: https://ws.slack.com/archives/C123/p1700000000123456
    """
    return f"{workspace_url.rstrip('/')}/archives/{channel_id}/p{thread_ts.replace('.', '')}"
