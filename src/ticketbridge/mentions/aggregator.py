"""멘션 집계기

레지스트리의 채널들을 일정 구간(기본 24시간) 동안 스캔하여
추적 대상별로 멘션된 스레드 링크를 모읍니다.

스레드에 속한 메시지(thread_ts 있음)의 멘션만 집계합니다.
스레드 밖의 단발성 멘션은 요약 대상이 아닙니다.
"""

import logging
from datetime import datetime
from typing import Iterable

from ticketbridge.channels.registry import ChannelRegistry
from ticketbridge.mentions.parser import build_thread_link, find_mentions
from ticketbridge.slack.directory import SlackDirectory, slack_error_code, to_slack_ts

logger = logging.getLogger(__name__)


class MentionAggregator:
    """채널 히스토리에서 추적 대상 멘션을 집계"""

    def __init__(
        self,
        registry: ChannelRegistry,
        directory: SlackDirectory,
        tracked_users: Iterable[str],
        workspace_url: str,
    ):
        self.registry = registry
        self.directory = directory
        self.tracked_users = frozenset(tracked_users)
        self.workspace_url = workspace_url

    def aggregate(self, window_start: datetime) -> dict[str, list[str]]:
        """window_start 이후 메시지에서 추적 대상별 스레드 링크 집계

        Returns:
            추적 대상 ID -> 스레드 링크 목록 (사람별 중복 제거, 발견 순서 유지)
        """
        oldest = to_slack_ts(window_start)
        mentions: dict[str, list[str]] = {}

        for channel_id in sorted(self.registry.channels):
            try:
                self._collect_channel(channel_id, oldest, mentions)
            except Exception as e:
                logger.error(f"채널 메시지 조회 실패 ({channel_id}): {slack_error_code(e)}")

        total = sum(len(links) for links in mentions.values())
        logger.info(f"멘션 집계 완료: {len(mentions)}명, 스레드 링크 {total}개")
        return mentions

    def _collect_channel(self, channel_id: str, oldest: str, mentions: dict[str, list[str]]) -> None:
        """채널 하나의 구간 내 메시지를 모두 확인"""
        for message in self.directory.iter_history(channel_id, oldest=oldest):
            thread_ts = message.get("thread_ts")
            if not thread_ts:
                continue

            mentioned = find_mentions(message.get("text", ""), self.tracked_users)
            if not mentioned:
                continue

            link = build_thread_link(self.workspace_url, channel_id, thread_ts)
            for user_id in mentioned:
                links = mentions.setdefault(user_id, [])
                if link not in links:
                    links.append(link)
