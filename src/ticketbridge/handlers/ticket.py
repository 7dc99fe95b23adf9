"""스레드 → Jira 티켓 생성

봇을 멘션하고 트리거 문구("create ticket")를 포함한 스레드 메시지가 오면
스레드 전체를 요약하여 Jira 이슈를 만들고, 이슈 링크를 스레드에 답글로 남깁니다.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ticketbridge.handlers.dedup import EventDedupGuard, event_key
from ticketbridge.jira.client import JiraClient
from ticketbridge.slack.directory import SlackDirectory
from ticketbridge.slack.formatting import TICKET_FAILED_MESSAGE, format_ticket_created
from ticketbridge.summarizer import ThreadSummarizer, join_thread_text

logger = logging.getLogger(__name__)

STATUS_IGNORED = "ignored"
STATUS_DUPLICATE = "duplicate"
STATUS_CREATED = "created"
STATUS_FAILED = "failed"


class TicketCreationError(Exception):
    """티켓 생성 파이프라인 단계 실패"""


@dataclass
class TicketResult:
    """트리거 처리 결과"""
    status: str
    issue_key: Optional[str] = None
    issue_url: Optional[str] = None
    error: Optional[str] = None


def is_trigger_event(event: dict, bot_user_id: Optional[str], trigger_phrase: str) -> bool:
    """티켓 생성 트리거 이벤트인지 확인

    조건: 텍스트 있음, 봇 멘션 포함, 스레드 안의 메시지, 트리거 문구 포함
    """
    text = event.get("text") or ""
    if not text or not bot_user_id:
        return False
    if f"<@{bot_user_id}>" not in text:
        return False
    if not event.get("thread_ts"):
        return False
    return trigger_phrase.lower() in text.lower()


class TicketOrchestrator:
    """트리거 이벤트를 받아 Jira 티켓 생성까지 조율"""

    def __init__(
        self,
        directory: SlackDirectory,
        summarizer: ThreadSummarizer,
        jira: JiraClient,
        dedup: EventDedupGuard,
        bot_user_id: Optional[str],
        project_key: str,
        issue_type: str = "Task",
        trigger_phrase: str = "create ticket",
    ):
        self.directory = directory
        self.summarizer = summarizer
        self.jira = jira
        self.dedup = dedup
        self.bot_user_id = bot_user_id
        self.project_key = project_key
        self.issue_type = issue_type
        self.trigger_phrase = trigger_phrase

    def handle_trigger(self, event: dict) -> TicketResult:
        """트리거 이벤트 처리

        중복 가드는 외부에 보이는 동작보다 먼저 기록됩니다. 이후 단계가 실패하면
        스레드에 실패 안내를 남기고 재시도하지 않습니다.
        """
        if not is_trigger_event(event, self.bot_user_id, self.trigger_phrase):
            return TicketResult(status=STATUS_IGNORED)

        if not self.dedup.should_process(event_key(event)):
            return TicketResult(status=STATUS_DUPLICATE)

        channel_id = event["channel"]
        thread_ts = event["thread_ts"]
        logger.info(f"티켓 생성 요청: {channel_id}/{thread_ts} (user={event.get('user')})")

        try:
            issue_key, issue_url = self._create_ticket(channel_id, thread_ts, event.get("user", ""))
        except Exception as e:
            logger.exception(f"티켓 생성 실패 ({channel_id}/{thread_ts}): {e}")
            self.directory.post_message(channel_id, TICKET_FAILED_MESSAGE, thread_ts=thread_ts)
            return TicketResult(status=STATUS_FAILED, error=str(e))

        self.directory.post_message(
            channel_id,
            format_ticket_created(issue_url, issue_key),
            thread_ts=thread_ts,
        )
        return TicketResult(status=STATUS_CREATED, issue_key=issue_key, issue_url=issue_url)

    def _create_ticket(self, channel_id: str, thread_ts: str, user: str) -> tuple[str, str]:
        """스레드 조회 → 요약 → 영구 링크 → 이슈 생성

        Returns:
            (issue_key, issue_url)

        Raises:
            TicketCreationError: 협력자가 실패 값을 반환한 경우
        """
        messages = self.directory.fetch_thread(channel_id, thread_ts)

        description = self.summarizer.summarize(join_thread_text(messages))
        if description is None:
            raise TicketCreationError("스레드 요약 생성 실패")

        thread_link = self.directory.permalink(channel_id, thread_ts)

        issue_key = self.jira.create_issue(
            project=self.project_key,
            summary=f"Ticket created for message from {user}",
            description=f"{description}\n\nSlack Thread: {thread_link}",
            issue_type=self.issue_type,
        )
        if not issue_key:
            raise TicketCreationError("Jira 이슈 생성 실패")

        return issue_key, self.jira.issue_url(issue_key)
