"""ticketbridge - Slack 스레드를 Jira 티켓으로 연결하는 봇"""

__version__ = "0.1.0"
