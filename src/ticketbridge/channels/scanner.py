"""채널 멤버십 스캐너

봇이 볼 수 있는 모든 채널을 순회하며 추적 대상이 속한 채널을 찾고,
봇이 아직 들어가지 않은 채널에는 가입합니다.
"""

import logging
from typing import Iterable, Optional

from ticketbridge.slack.directory import SlackDirectory, slack_error_code

logger = logging.getLogger(__name__)


def has_tracked_member(members: Iterable[str], tracked: Iterable[str]) -> bool:
    """멤버 목록에 추적 대상이 한 명이라도 있는지 확인"""
    return not set(tracked).isdisjoint(members)


class MembershipScanner:
    """전체 채널을 스캔하여 추적 범위(scope)를 계산"""

    def __init__(
        self,
        directory: SlackDirectory,
        bot_user_id: Optional[str],
        tracked_users: Iterable[str],
    ):
        """
        Args:
            directory: Slack 디렉토리 협력자
            bot_user_id: 봇 사용자 ID (멤버 여부 판단용)
            tracked_users: 추적 대상 사용자 ID 목록
        """
        self.directory = directory
        self.bot_user_id = bot_user_id
        self.tracked_users = frozenset(tracked_users)

    def scan_for_scope(self, tracked_users: Optional[Iterable[str]] = None) -> set[str]:
        """추적 대상이 속한 채널 ID 집합 반환

        보관(archived) 채널은 항상 제외합니다. 개별 채널 조회/가입 실패는
        로그만 남기고 해당 채널을 건너뜁니다. 채널 목록 조회 자체가 실패하면
        그때까지 모은 결과를 반환합니다.

        Args:
            tracked_users: 이번 스캔에만 쓸 추적 대상 (생략 시 생성자 값)
        """
        tracked = frozenset(tracked_users) if tracked_users is not None else self.tracked_users
        scope: set[str] = set()
        scanned = 0

        try:
            for channel in self.directory.iter_channels():
                scanned += 1
                channel_id = channel.get("id")
                if not channel_id or channel.get("is_archived"):
                    continue
                if self._check_channel(channel, tracked):
                    scope.add(channel_id)
        except Exception as e:
            logger.error(f"채널 목록 조회 실패 (스캔 중단, {scanned}개 처리): {slack_error_code(e)}")

        logger.info(f"채널 스캔 완료: {scanned}개 중 {len(scope)}개 채널에 추적 대상 존재")
        return scope

    def _check_channel(self, channel: dict, tracked: frozenset[str]) -> bool:
        """채널 하나를 검사 (필요 시 가입)

        Returns:
            추적 범위에 포함해야 하면 True
        """
        channel_id = channel["id"]
        label = channel.get("name") or channel_id
        try:
            members = self.directory.channel_members(channel_id)
            is_member = self._bot_is_member(channel, members)
        except Exception as e:
            logger.error(f"채널 멤버 조회 실패 ({label}): {slack_error_code(e)}")
            return False

        if not is_member:
            try:
                self.directory.join_channel(channel_id)
                logger.info(f"채널 가입: {label}")
            except Exception as e:
                logger.error(f"채널 가입 실패 ({label}): {slack_error_code(e)}")
                return False

        return has_tracked_member(members, tracked)

    def _bot_is_member(self, channel: dict, members: list[str]) -> bool:
        """봇이 채널 멤버인지 확인

        봇 ID를 모르면 채널 목록의 is_member 값을, 그것도 없으면
        conversations.info 결과를 사용합니다.
        """
        if self.bot_user_id:
            return self.bot_user_id in members
        if "is_member" in channel:
            return bool(channel["is_member"])
        return self.directory.channel_info(channel["id"])["is_member"]
