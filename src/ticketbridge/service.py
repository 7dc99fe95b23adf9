"""브리지 서비스

프로세스 시작 시 한 번 생성되어 종료까지 유지되는 상태 소유 객체입니다.
채널 레지스트리, 이벤트 중복 가드, 외부 협력자(Slack/Jira/OpenAI)와
그 위의 스캐너/정리기/집계기/오케스트레이터/정비 작업을 묶어 보관합니다.
"""

import logging
from pathlib import Path

from ticketbridge.channels.reconciler import RegistryReconciler
from ticketbridge.channels.registry import ChannelRegistry
from ticketbridge.channels.scanner import MembershipScanner
from ticketbridge.config import Config
from ticketbridge.digest.job import DailyDigestJob
from ticketbridge.handlers.dedup import EventDedupGuard
from ticketbridge.handlers.ticket import TicketOrchestrator
from ticketbridge.jira.client import JiraClient
from ticketbridge.mentions.aggregator import MentionAggregator
from ticketbridge.slack.directory import SlackDirectory
from ticketbridge.summarizer import ThreadSummarizer

logger = logging.getLogger(__name__)


class BridgeService:
    """브리지 구성 요소 묶음

    bot_user_id는 생성 전에 확정되어 있어야 합니다 (BOT_USER_ID 또는 auth.test).
    """

    def __init__(
        self,
        directory: SlackDirectory,
        jira: JiraClient,
        summarizer: ThreadSummarizer,
        registry: ChannelRegistry,
        bot_user_id: str | None,
        tracked_users: list[str],
        *,
        workspace_url: str,
        report_channel: str,
        project_key: str,
        issue_type: str,
        trigger_phrase: str,
        board_assignees: list[str],
        window_hours: int = 24,
    ):
        self.directory = directory
        self.jira = jira
        self.summarizer = summarizer
        self.registry = registry
        self.bot_user_id = bot_user_id
        self.tracked_users = frozenset(tracked_users)

        self.dedup = EventDedupGuard()
        self.scanner = MembershipScanner(directory, bot_user_id, self.tracked_users)
        self.reconciler = RegistryReconciler(registry, directory, self.scanner, self.tracked_users)
        self.aggregator = MentionAggregator(registry, directory, self.tracked_users, workspace_url)
        self.ticket_orchestrator = TicketOrchestrator(
            directory=directory,
            summarizer=summarizer,
            jira=jira,
            dedup=self.dedup,
            bot_user_id=bot_user_id,
            project_key=project_key,
            issue_type=issue_type,
            trigger_phrase=trigger_phrase,
        )
        self.digest_job = DailyDigestJob(
            reconciler=self.reconciler,
            aggregator=self.aggregator,
            directory=directory,
            jira=jira,
            report_channel=report_channel,
            project_key=project_key,
            board_assignees=board_assignees,
            window_hours=window_hours,
        )

        if not self.tracked_users:
            logger.warning("TRACKED_USERS가 비어 있어 추적 대상 채널이 없습니다.")

    @classmethod
    def from_config(cls, slack_client, bot_user_id: str | None) -> "BridgeService":
        """Config 값으로 서비스 생성"""
        return cls(
            directory=SlackDirectory(slack_client),
            jira=JiraClient(
                host=Config.jira.host,
                email=Config.jira.email,
                api_token=Config.jira.api_token,
                timeout=Config.jira.timeout,
            ),
            summarizer=ThreadSummarizer(
                api_key=Config.openai.api_key,
                model=Config.openai.model,
                timeout=Config.openai.timeout,
            ),
            registry=ChannelRegistry(Path(Config.get_data_path())),
            bot_user_id=bot_user_id,
            tracked_users=Config.tracking.tracked_users,
            workspace_url=Config.slack.workspace_url,
            report_channel=Config.slack.report_channel,
            project_key=Config.jira.project_key,
            issue_type=Config.jira.issue_type,
            trigger_phrase=Config.tracking.trigger_phrase,
            board_assignees=Config.jira.board_assignees,
            window_hours=Config.schedule.mention_window_hours,
        )

    def build_dependencies(self) -> dict:
        """핸들러 의존성 딕셔너리 빌드"""
        return {
            "ticket_orchestrator": self.ticket_orchestrator,
        }
