"""Jira API 클라이언트"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

ISSUE_ENDPOINT = "/rest/api/2/issue"
SEARCH_ENDPOINT = "/rest/api/3/search/jql"


@dataclass
class JiraIssue:
    """Jira 이슈 요약 정보"""
    key: str
    summary: str
    url: str


def normalize_base_url(host: str) -> str:
    """JIRA_HOST를 https:// 기준 URL로 정규화 (끝 슬래시 제거)"""
    host = host.strip().rstrip("/")
    if not host:
        return ""
    if host.startswith("http://") or host.startswith("https://"):
        return host
    return f"https://{host}"


class JiraClient:
    """Jira REST API 클라이언트 (Basic 인증: 이메일 + API 토큰)"""

    def __init__(
        self,
        host: str,
        email: str,
        api_token: str,
        timeout: int = 30,
    ):
        self.base_url = normalize_base_url(host)
        self.email = email
        self.api_token = api_token
        self.timeout = timeout

        if not self.is_configured():
            logger.warning("Jira 호스트/이메일/API 토큰이 설정되지 않았습니다.")

    def _request(self, method: str, endpoint: str, **kwargs) -> Optional[dict]:
        """API 요청 (실패 시 로그 후 None)"""
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.request(
                method,
                url,
                auth=(self.email, self.api_token),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Jira API 요청 실패: {e}")
            return None
        except ValueError as e:
            logger.error(f"Jira API 응답 파싱 실패: {e}")
            return None

    def issue_url(self, key: str) -> str:
        """이슈 키로 브라우저 URL 생성"""
        return f"{self.base_url}/browse/{key}"

    def create_issue(
        self,
        project: str,
        summary: str,
        description: str,
        issue_type: str = "Task",
    ) -> Optional[str]:
        """이슈 생성

        Args:
            project: 프로젝트 키 (예: "DX")
            summary: 제목
            description: 본문 (plain text)
            issue_type: 이슈 유형 이름

        Returns:
            생성된 이슈 키 (실패 시 None)
        """
        payload = {
            "fields": {
                "project": {"key": project},
                "summary": summary,
                "description": description,
                "issuetype": {"name": issue_type},
            }
        }
        data = self._request("POST", ISSUE_ENDPOINT, json=payload)
        if not data or not data.get("key"):
            return None

        logger.info(f"Jira 이슈 생성: {data['key']}")
        return data["key"]

    def search_assigned_issues(self, project: str, assignee: str) -> list[JiraIssue]:
        """프로젝트에서 특정 담당자에게 할당된 이슈 조회

        Args:
            project: 프로젝트 키
            assignee: 담당자 이메일

        Returns:
            이슈 목록 (실패 시 빈 리스트)
        """
        jql = f'project = "{project}" AND assignee = "{assignee}"'
        data = self._request(
            "GET",
            SEARCH_ENDPOINT,
            params={"jql": jql, "fields": "key,summary"},
        )
        if not data:
            return []

        return [
            JiraIssue(
                key=issue["key"],
                summary=(issue.get("fields") or {}).get("summary", ""),
                url=self.issue_url(issue["key"]),
            )
            for issue in data.get("issues", [])
        ]

    def is_configured(self) -> bool:
        """API 설정 여부 확인"""
        return bool(self.base_url and self.email and self.api_token)
