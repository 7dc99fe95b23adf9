"""설정 관리

카테고리별로 구분된 설정을 관리합니다.
- 경로 설정: get_*() 메서드 (cwd 기준 계산 필요)
- 그 외 설정: @dataclass 하위 그룹 (모듈 로드 시 평가)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """설정 오류 예외

    필수 환경변수 누락 등 설정 관련 오류 시 발생합니다.
    """

    def __init__(self, missing_vars: List[str]):
        self.missing_vars = missing_vars
        message = f"필수 환경변수가 설정되지 않았습니다: {', '.join(missing_vars)}"
        super().__init__(message)


def _get_path(env_var: str, default_subdir: str) -> str:
    """환경변수가 없으면 현재 경로 하위 폴더 반환"""
    env_value = os.getenv(env_var)
    if env_value:
        return env_value
    return str(Path.cwd() / default_subdir)


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """문자열을 bool로 변환"""
    if value is None:
        return default
    return value.lower() == "true"


def _parse_list(value: str | None) -> list[str]:
    """쉼표 구분 문자열을 리스트로 변환 (빈 항목 제외)"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class SlackConfig:
    """Slack 연결 설정"""

    bot_token: str | None = os.getenv("SLACK_BOT_TOKEN")
    app_token: str | None = os.getenv("SLACK_APP_TOKEN")
    signing_secret: str | None = os.getenv("SLACK_SIGNING_SECRET")
    # 비어 있으면 런타임에 auth.test()로 설정
    bot_user_id: str | None = os.getenv("BOT_USER_ID") or None
    workspace_url: str = os.getenv(
        "SLACK_WORKSPACE_URL", "https://yourworkspace.slack.com"
    )
    report_channel: str = os.getenv("SLACK_REPORT_CHANNEL", "")
    timeout: int = int(os.getenv("SLACK_TIMEOUT", "30"))


@dataclass
class TrackingConfig:
    """추적 대상 설정"""

    tracked_users: list[str] = field(
        default_factory=lambda: _parse_list(os.getenv("TRACKED_USERS"))
    )
    trigger_phrase: str = os.getenv("TRIGGER_PHRASE", "create ticket")


@dataclass
class JiraConfig:
    """Jira 연동 설정"""

    host: str = os.getenv("JIRA_HOST", "")
    email: str = os.getenv("JIRA_EMAIL", "")
    api_token: str = os.getenv("JIRA_API_TOKEN", "")
    project_key: str = os.getenv("JIRA_PROJECT_KEY", "DX")
    issue_type: str = os.getenv("JIRA_ISSUE_TYPE", "Task")
    board_assignees: list[str] = field(
        default_factory=lambda: _parse_list(os.getenv("JIRA_BOARD_ASSIGNEES"))
    )
    timeout: int = int(os.getenv("JIRA_TIMEOUT", "30"))


@dataclass
class OpenAIConfig:
    """OpenAI 설정 (스레드 요약)"""

    api_key: str | None = os.getenv("OPENAI_API_KEY")
    model: str = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
    timeout: float = float(os.getenv("OPENAI_TIMEOUT", "60"))


@dataclass
class ScheduleConfig:
    """일일 정비 작업 설정"""

    # 로컬 시각 HH:MM
    digest_time: str = os.getenv("DIGEST_TIME", "14:22")
    mention_window_hours: int = int(os.getenv("MENTION_WINDOW_HOURS", "24"))


class Config:
    """애플리케이션 설정

    설정 접근 방식:
    - 경로 관련: get_*() 메서드 (런타임에 cwd 기준 계산)
    - 그 외: 하위 설정 그룹 (모듈 로드 시 평가)
    """

    debug: bool = _parse_bool(os.getenv("DEBUG"), False)
    port: int = int(os.getenv("PORT", "3000"))

    slack = SlackConfig()
    tracking = TrackingConfig()
    jira = JiraConfig()
    openai = OpenAIConfig()
    schedule = ScheduleConfig()

    # ========================================
    # 경로 설정 (런타임에 cwd 기준 계산)
    # ========================================
    @staticmethod
    def get_log_path() -> str:
        """로그 경로"""
        return _get_path("LOG_PATH", "logs")

    @staticmethod
    def get_data_path() -> str:
        """상태 파일(채널 레지스트리) 경로"""
        return _get_path("DATA_PATH", "data")

    # ========================================
    # 검증
    # ========================================
    @classmethod
    def validate(cls) -> None:
        """필수 환경변수 검증

        필수 환경변수가 누락된 경우 ConfigurationError를 발생시킵니다.
        Socket Mode(SLACK_APP_TOKEN)가 아니면 HTTP 서명 검증용
        SLACK_SIGNING_SECRET이 필요합니다.

        Raises:
            ConfigurationError: 필수 환경변수 누락 시
        """
        missing = []
        if not cls.slack.bot_token:
            missing.append("SLACK_BOT_TOKEN")
        if not cls.slack.app_token and not cls.slack.signing_secret:
            missing.append("SLACK_SIGNING_SECRET")

        if missing:
            raise ConfigurationError(missing)
