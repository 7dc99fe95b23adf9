"""Slack WebClient 래퍼

채널 목록/멤버/히스토리/스레드 조회와 메시지 전송을 좁은 인터페이스로 제공합니다.
커서 기반 페이지네이션은 iter_*() 헬퍼가 끝까지 따라갑니다.

조회 메서드는 실패 시 SlackApiError를 그대로 올립니다. 항목 단위로
건너뛸지 여부는 호출부(스캐너, 정리기, 집계기)가 결정합니다.
"""

import logging
from datetime import datetime
from typing import Iterator, Optional

from slack_sdk.errors import SlackApiError

logger = logging.getLogger(__name__)

CHANNEL_TYPES = "public_channel,private_channel"
DEFAULT_PAGE_SIZE = 100


def _next_cursor(response) -> Optional[str]:
    """응답의 다음 페이지 커서 (없으면 None)"""
    metadata = response.get("response_metadata") or {}
    return metadata.get("next_cursor") or None


def to_slack_ts(moment: datetime) -> str:
    """datetime을 Slack 타임스탬프 문자열로 변환"""
    return f"{moment.timestamp():.6f}"


class SlackDirectory:
    """채널 디렉토리 + 히스토리 + 전송 협력자"""

    def __init__(self, client, page_size: int = DEFAULT_PAGE_SIZE):
        """
        Args:
            client: Slack WebClient (타임아웃은 클라이언트 생성 시 지정)
            page_size: 페이지당 조회 개수
        """
        self.client = client
        self.page_size = page_size

    # ========================================
    # 채널 디렉토리
    # ========================================
    def list_channels(self, cursor: Optional[str] = None) -> tuple[list[dict], Optional[str]]:
        """채널 목록 한 페이지 조회

        Returns:
            (channels, next_cursor): 다음 페이지가 없으면 next_cursor는 None
        """
        response = self.client.conversations_list(
            types=CHANNEL_TYPES,
            limit=self.page_size,
            cursor=cursor,
        )
        return list(response.get("channels") or []), _next_cursor(response)

    def iter_channels(self) -> Iterator[dict]:
        """모든 채널을 페이지 끝까지 순회"""
        cursor = None
        while True:
            channels, cursor = self.list_channels(cursor)
            yield from channels
            if not cursor:
                break
            logger.debug(f"채널 목록 다음 페이지: cursor={cursor}")

    def channel_info(self, channel_id: str) -> dict:
        """채널 상태 조회

        Returns:
            {"is_archived": bool, "is_member": bool}
        """
        response = self.client.conversations_info(channel=channel_id)
        channel = response.get("channel") or {}
        return {
            "is_archived": bool(channel.get("is_archived", False)),
            "is_member": bool(channel.get("is_member", False)),
        }

    def join_channel(self, channel_id: str) -> None:
        """채널 가입 (실패 시 SlackApiError)"""
        self.client.conversations_join(channel=channel_id)

    def channel_members(self, channel_id: str) -> list[str]:
        """채널 멤버 전체 조회 (페이지네이션 포함)"""
        members: list[str] = []
        cursor = None
        while True:
            response = self.client.conversations_members(
                channel=channel_id,
                limit=self.page_size,
                cursor=cursor,
            )
            members.extend(response.get("members") or [])
            cursor = _next_cursor(response)
            if not cursor:
                return members

    # ========================================
    # 히스토리
    # ========================================
    def history(
        self,
        channel_id: str,
        oldest: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> tuple[list[dict], Optional[str], bool]:
        """채널 히스토리 한 페이지 조회

        Returns:
            (messages, next_cursor, has_more)
        """
        kwargs = {"channel": channel_id, "limit": self.page_size}
        if oldest is not None:
            kwargs["oldest"] = oldest
        if cursor:
            kwargs["cursor"] = cursor
        response = self.client.conversations_history(**kwargs)
        return (
            list(response.get("messages") or []),
            _next_cursor(response),
            bool(response.get("has_more", False)),
        )

    def iter_history(self, channel_id: str, oldest: Optional[str] = None) -> Iterator[dict]:
        """oldest 이후의 모든 메시지를 페이지 끝까지 순회"""
        cursor = None
        while True:
            messages, cursor, has_more = self.history(channel_id, oldest=oldest, cursor=cursor)
            yield from messages
            if not (has_more and cursor):
                break

    def thread_replies(
        self,
        channel_id: str,
        thread_ts: str,
        cursor: Optional[str] = None,
    ) -> tuple[list[dict], Optional[str], bool]:
        """스레드 답글 한 페이지 조회

        Returns:
            (messages, next_cursor, has_more)
        """
        kwargs = {"channel": channel_id, "ts": thread_ts, "limit": self.page_size}
        if cursor:
            kwargs["cursor"] = cursor
        response = self.client.conversations_replies(**kwargs)
        return (
            list(response.get("messages") or []),
            _next_cursor(response),
            bool(response.get("has_more", False)),
        )

    def fetch_thread(self, channel_id: str, thread_ts: str) -> list[dict]:
        """스레드 전체(부모 + 모든 답글)를 조회

        conversations.replies는 보통 부모 메시지를 첫 항목으로 포함합니다.
        포함되지 않은 경우에만 히스토리에서 부모를 따로 가져와 앞에 붙입니다.
        """
        messages: list[dict] = []
        cursor = None
        while True:
            page, cursor, has_more = self.thread_replies(channel_id, thread_ts, cursor=cursor)
            messages.extend(page)
            if not (has_more and cursor):
                break

        if not any(m.get("ts") == thread_ts for m in messages):
            response = self.client.conversations_history(
                channel=channel_id,
                latest=thread_ts,
                inclusive=True,
                limit=1,
            )
            parent = response.get("messages") or []
            if parent:
                messages.insert(0, parent[0])
            else:
                logger.warning(f"부모 메시지를 찾을 수 없음: {channel_id}/{thread_ts}")

        return messages

    def permalink(self, channel_id: str, message_ts: str) -> str:
        """메시지 영구 링크 조회"""
        response = self.client.chat_getPermalink(channel=channel_id, message_ts=message_ts)
        return response["permalink"]

    # ========================================
    # 전송
    # ========================================
    def post_message(self, channel_id: str, text: str, thread_ts: Optional[str] = None) -> bool:
        """메시지 전송 (thread_ts가 있으면 스레드에 전송)

        Returns:
            성공 여부
        """
        kwargs = {"channel": channel_id, "text": text}
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
        try:
            self.client.chat_postMessage(**kwargs)
            return True
        except Exception as e:
            logger.error(f"메시지 전송 실패 ({channel_id}): {slack_error_code(e)}")
            return False


def slack_error_code(error: Exception) -> str:
    """SlackApiError면 에러 코드, 아니면 예외 문자열"""
    if isinstance(error, SlackApiError):
        response = error.response
        code = response.get("error") if response is not None else None
        if code:
            return str(code)
    return str(error)
