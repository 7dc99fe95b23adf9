"""Slack 유틸리티 패키지"""

from ticketbridge.slack.directory import SlackDirectory, slack_error_code, to_slack_ts
from ticketbridge.slack.formatting import (
    format_board_digest,
    format_mention_digest,
    format_ticket_created,
    TICKET_FAILED_MESSAGE,
)

__all__ = [
    "SlackDirectory",
    "slack_error_code",
    "to_slack_ts",
    "format_board_digest",
    "format_mention_digest",
    "format_ticket_created",
    "TICKET_FAILED_MESSAGE",
]
