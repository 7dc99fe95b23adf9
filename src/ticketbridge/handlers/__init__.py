"""Slack 이벤트 핸들러 패키지"""

from ticketbridge.handlers.dedup import EventDedupGuard
from ticketbridge.handlers.message import register_message_handlers
from ticketbridge.handlers.ticket import TicketOrchestrator, TicketResult


def register_all_handlers(app, dependencies: dict):
    """모든 핸들러를 앱에 등록

    Args:
        app: Slack Bolt App 인스턴스
        dependencies: 핸들러에 필요한 의존성
            - ticket_orchestrator: TicketOrchestrator
    """
    register_message_handlers(app, dependencies)


__all__ = [
    "EventDedupGuard",
    "TicketOrchestrator",
    "TicketResult",
    "register_all_handlers",
    "register_message_handlers",
]
