"""스레드 요약 모듈

슬랙 스레드 대화를 OpenAI API로 요약하여 Jira 이슈 본문을 생성합니다.
"""

import logging
from typing import Optional

import openai

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant."

USER_PROMPT_TEMPLATE = (
    "Here is the context from a Slack thread:\n\n"
    "{thread_text}\n\n"
    "Your task is to analyze the entire thread context and create a detailed "
    "description based only on the issue or discussion presented in the messages. "
    "Do not include any mention of the action to create a ticket or replies that "
    "ask for ticket creation. Focus solely on the core issue or context being "
    "discussed. Ensure the description is accurate, complete, and written as a "
    "professional explanation."
)


def join_thread_text(messages: list[dict]) -> str:
    """스레드 메시지 텍스트를 줄 단위로 이어 붙임 (빈 텍스트 제외)"""
    return "\n".join(m.get("text", "") for m in messages if m.get("text"))


class ThreadSummarizer:
    """스레드 대화를 Jira 이슈 설명으로 요약"""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4.1-mini",
        timeout: float = 60,
        max_tokens: int = 1000,
    ):
        self.client = openai.OpenAI(api_key=api_key, timeout=timeout) if api_key else None
        self.model = model
        self.max_tokens = max_tokens

        if self.client is None:
            logger.warning("OPENAI_API_KEY가 설정되지 않아 스레드 요약을 생성할 수 없습니다.")

    def summarize(self, thread_text: str) -> Optional[str]:
        """스레드 텍스트를 요약

        Args:
            thread_text: 부모 + 답글을 이어 붙인 스레드 텍스트

        Returns:
            요약된 설명 (실패 시 None)
        """
        if self.client is None:
            return None

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": USER_PROMPT_TEMPLATE.format(thread_text=thread_text)},
                ],
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            logger.error(f"스레드 요약 실패: {e}")
            return None

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            logger.warning("스레드 요약 응답이 비어 있습니다.")
            return None
        return content
