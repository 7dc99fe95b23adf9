"""Jira 연동 모듈"""

from ticketbridge.jira.client import JiraClient, JiraIssue

__all__ = [
    "JiraClient",
    "JiraIssue",
]
