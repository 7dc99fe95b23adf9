"""슬랙 메시지 포맷팅 유틸리티

티켓 생성 결과, 멘션 요약, Jira 보드 요약을 슬랙 mrkdwn 문자열로 변환하는
순수 함수들을 제공합니다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ticketbridge.jira.client import JiraIssue

TICKET_FAILED_MESSAGE = "Failed to create Jira ticket. Please try again later."


def format_ticket_created(issue_url: str, issue_key: str) -> str:
    """티켓 생성 완료 메시지"""
    return f"Jira ticket created: <{issue_url}|{issue_key}>"


def format_mention_digest(mentions: dict[str, list[str]], window_hours: int = 24) -> str:
    """멘션 요약 메시지 포맷

    Args:
        mentions: 추적 대상 ID -> 스레드 링크 목록
        window_hours: 집계 구간 (시간)

    Returns:
        mrkdwn 문자열 (멘션이 없으면 빈 문자열)
    """
    if not any(mentions.values()):
        return ""

    lines = [f"*Tracked Mentions (Last {window_hours} Hours):*"]
    for user_id, links in mentions.items():
        if not links:
            continue
        lines.append(f"<@{user_id}>")
        for i, link in enumerate(links, start=1):
            lines.append(f"    {i}. <{link}|View Thread>")
    return "\n".join(lines)


def format_board_digest(project_key: str, issues_by_assignee: dict[str, list[JiraIssue]]) -> str:
    """Jira 보드 요약 메시지 포맷

    Args:
        project_key: Jira 프로젝트 키
        issues_by_assignee: 담당자 이메일 -> 이슈 목록

    Returns:
        mrkdwn 문자열
    """
    lines = [f"*{project_key} Board Tickets (In Progress):*"]
    for assignee, issues in issues_by_assignee.items():
        lines.append(f"*{assignee}*:")
        if not issues:
            lines.append("    No tickets in progress.")
            continue
        for i, issue in enumerate(issues, start=1):
            lines.append(f"    {i}. *{issue.key}*: {issue.summary} - <{issue.url}|Link>")
    return "\n".join(lines)
