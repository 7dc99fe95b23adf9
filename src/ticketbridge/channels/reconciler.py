"""채널 레지스트리 정리기

일일 정비 작업에서 레지스트리를 최신 상태로 맞춥니다.
1. 새 채널 가입: 레지스트리에 없는 활성 채널에 가입하고 추가
2. 오래된 채널 정리: 추적 대상이 더 이상 없는 채널 제거

두 단계는 같은 스냅샷에 순서대로 적용되고, 마지막에 한 번 저장합니다.
새 채널 가입이 먼저 수행되어야 이번 주기에 추가된 채널도 정리 단계에서
추적 대상 여부를 검사받습니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ticketbridge.channels.registry import ChannelRegistry
from ticketbridge.channels.scanner import MembershipScanner, has_tracked_member
from ticketbridge.slack.directory import SlackDirectory, slack_error_code

logger = logging.getLogger(__name__)

# 멤버 조회 시 이 오류는 "채널이 없거나 접근 불가"로 확정된 것으로 보고 제거합니다.
# 그 밖의 오류(레이트 리밋, 네트워크, 타임아웃 등)는 채널을 유지합니다.
DEFINITIVE_MEMBER_ERRORS = frozenset({"channel_not_found", "not_in_channel", "is_archived"})


@dataclass
class ReconcileResult:
    """정리 결과"""
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    kept_on_error: list[str] = field(default_factory=list)
    channels: set[str] = field(default_factory=set)
    saved: bool = False


class RegistryReconciler:
    """레지스트리 가입/정리 담당 (레지스트리의 유일한 writer)"""

    def __init__(
        self,
        registry: ChannelRegistry,
        directory: SlackDirectory,
        scanner: MembershipScanner,
        tracked_users: Iterable[str],
    ):
        self.registry = registry
        self.directory = directory
        self.scanner = scanner
        self.tracked_users = frozenset(tracked_users)

    def bootstrap(self) -> set[str]:
        """부팅 시 레지스트리 초기화

        저장된 레지스트리가 비어 있으면 전체 스캔으로 채우고 저장합니다.
        """
        channels = self.registry.load()
        if channels:
            logger.info(f"저장된 채널 레지스트리 사용: {len(channels)}개 채널")
            return channels

        logger.info("채널 레지스트리가 비어 있어 전체 채널을 스캔합니다...")
        channels = self.scanner.scan_for_scope(self.tracked_users)
        self.registry.save(channels)
        return channels

    def reconcile(self) -> ReconcileResult:
        """새 채널 가입 후 오래된 채널 정리, 결과 저장"""
        result = ReconcileResult()
        channels = self.registry.channels

        self._join_new(channels, result)
        self._prune_stale(channels, result)

        result.channels = channels
        result.saved = self.registry.save(channels)
        logger.info(
            f"채널 레지스트리 정리: +{len(result.added)} -{len(result.removed)} "
            f"(오류로 유지 {len(result.kept_on_error)}), 총 {len(channels)}개"
        )
        return result

    def _join_new(self, channels: set[str], result: ReconcileResult) -> None:
        """레지스트리에 없는 활성 채널에 가입하고 추가"""
        try:
            for channel in self.directory.iter_channels():
                channel_id = channel.get("id")
                if not channel_id or channel_id in channels or channel.get("is_archived"):
                    continue

                label = channel.get("name") or channel_id
                if not channel.get("is_member"):
                    try:
                        self.directory.join_channel(channel_id)
                    except Exception as e:
                        logger.error(f"채널 가입 실패 ({label}): {slack_error_code(e)}")
                        continue

                channels.add(channel_id)
                result.added.append(channel_id)
                logger.info(f"새 채널 추가: {label}")
        except Exception as e:
            logger.error(f"채널 목록 조회 실패 (가입 단계 중단): {slack_error_code(e)}")

    def _prune_stale(self, channels: set[str], result: ReconcileResult) -> None:
        """추적 대상이 없는 채널 제거"""
        for channel_id in sorted(channels):
            try:
                members = self.directory.channel_members(channel_id)
            except Exception as e:
                code = slack_error_code(e)
                if code in DEFINITIVE_MEMBER_ERRORS:
                    channels.discard(channel_id)
                    result.removed.append(channel_id)
                    logger.info(f"접근 불가 채널 제거: {channel_id} ({code})")
                else:
                    result.kept_on_error.append(channel_id)
                    logger.error(f"채널 멤버 조회 실패, 유지 ({channel_id}): {code}")
                continue

            if not has_tracked_member(members, self.tracked_users):
                channels.discard(channel_id)
                result.removed.append(channel_id)
                logger.info(f"추적 대상 없는 채널 제거: {channel_id}")
