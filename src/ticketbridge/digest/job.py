"""일일 정비 작업

하루 한 번 실행되어 다음을 순서대로 수행합니다.
1. 채널 레지스트리 정리 (새 채널 가입 → 오래된 채널 제거)
2. 최근 구간의 추적 대상 멘션 집계
3. 멘션 요약 전송
4. Jira 보드 요약 전송

각 단계의 실패는 기록만 하고 다음 단계로 진행합니다.
결과는 DigestRunResult로 반환되어 스케줄러가 로그로 남깁니다.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ticketbridge.channels.reconciler import ReconcileResult, RegistryReconciler
from ticketbridge.jira.client import JiraClient, JiraIssue
from ticketbridge.mentions.aggregator import MentionAggregator
from ticketbridge.slack.directory import SlackDirectory
from ticketbridge.slack.formatting import format_board_digest, format_mention_digest

logger = logging.getLogger(__name__)


@dataclass
class DigestRunResult:
    """일일 정비 작업 결과"""
    skipped: bool = False
    reconcile: Optional[ReconcileResult] = None
    mentions: dict[str, list[str]] = field(default_factory=dict)
    mention_digest_sent: bool = False
    board_digest_sent: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.skipped and not self.errors


class DailyDigestJob:
    """레지스트리 정리 + 멘션/보드 요약 작업

    한 번에 하나의 실행만 허용합니다. 실행 중에 다시 호출되면 기다리지 않고
    skipped 결과를 반환합니다. 부팅 시 레지스트리 초기화(bootstrap)도 같은 락을
    사용하므로 레지스트리 파일에 두 작업이 동시에 쓰지 않습니다.
    """

    def __init__(
        self,
        reconciler: RegistryReconciler,
        aggregator: MentionAggregator,
        directory: SlackDirectory,
        jira: JiraClient,
        report_channel: str,
        project_key: str,
        board_assignees: list[str],
        window_hours: int = 24,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.reconciler = reconciler
        self.aggregator = aggregator
        self.directory = directory
        self.jira = jira
        self.report_channel = report_channel
        self.project_key = project_key
        self.board_assignees = list(board_assignees)
        self.window_hours = window_hours
        self.clock = clock

        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def bootstrap(self) -> set[str]:
        """부팅 시 레지스트리 초기화 (정비 작업과 직렬화)"""
        with self._lock:
            return self.reconciler.bootstrap()

    def run(self) -> DigestRunResult:
        """정비 작업 1회 실행"""
        if not self._lock.acquire(blocking=False):
            logger.warning("일일 정비 작업이 이미 실행 중이라 이번 실행은 건너뜁니다.")
            return DigestRunResult(skipped=True)

        try:
            return self._run()
        finally:
            self._lock.release()

    def _run(self) -> DigestRunResult:
        result = DigestRunResult()
        logger.info("일일 정비 작업 시작")

        try:
            result.reconcile = self.reconciler.reconcile()
            if not result.reconcile.saved:
                result.errors.append("reconcile: 레지스트리 저장 실패")
        except Exception as e:
            logger.exception(f"채널 레지스트리 정리 실패: {e}")
            result.errors.append(f"reconcile: {e}")

        try:
            window_start = self.clock() - timedelta(hours=self.window_hours)
            result.mentions = self.aggregator.aggregate(window_start)
        except Exception as e:
            logger.exception(f"멘션 집계 실패: {e}")
            result.errors.append(f"aggregate: {e}")

        if not self.report_channel:
            logger.warning("SLACK_REPORT_CHANNEL이 설정되지 않아 요약을 전송하지 않습니다.")
            return result

        result.mention_digest_sent = self._send_mention_digest(result)
        result.board_digest_sent = self._send_board_digest(result)

        logger.info(f"일일 정비 작업 완료 (오류 {len(result.errors)}건)")
        return result

    def _send_mention_digest(self, result: DigestRunResult) -> bool:
        """멘션 요약 전송 (멘션이 없으면 전송하지 않음)"""
        text = format_mention_digest(result.mentions, self.window_hours)
        if not text:
            logger.info("최근 멘션이 없어 멘션 요약을 전송하지 않습니다.")
            return False

        if self.directory.post_message(self.report_channel, text):
            return True
        result.errors.append("mention_digest: 전송 실패")
        return False

    def _send_board_digest(self, result: DigestRunResult) -> bool:
        """Jira 보드 요약 전송"""
        if not self.board_assignees:
            return False
        if not self.jira.is_configured():
            logger.warning("Jira가 설정되지 않아 보드 요약을 전송하지 않습니다.")
            return False

        issues_by_assignee: dict[str, list[JiraIssue]] = {}
        for assignee in self.board_assignees:
            issues_by_assignee[assignee] = self.jira.search_assigned_issues(
                self.project_key, assignee
            )

        text = format_board_digest(self.project_key, issues_by_assignee)
        if self.directory.post_message(self.report_channel, text):
            logger.info("보드 요약 전송 완료")
            return True
        result.errors.append("board_digest: 전송 실패")
        return False
