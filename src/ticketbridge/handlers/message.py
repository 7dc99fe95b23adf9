"""메시지 이벤트 핸들러"""

import logging

logger = logging.getLogger(__name__)


def register_message_handlers(app, dependencies: dict):
    """메시지 핸들러 등록

    Args:
        app: Slack Bolt App 인스턴스
        dependencies: 의존성 딕셔너리
    """
    ticket_orchestrator = dependencies["ticket_orchestrator"]

    @app.event("message")
    def handle_message(event):
        """스레드 안의 티켓 생성 요청 처리

        Bolt가 이벤트를 먼저 ack하고 워커 스레드에서 이 핸들러를 실행하므로,
        재전송된 이벤트가 동시에 들어올 수 있습니다. 중복은 오케스트레이터의
        중복 가드가 걸러냅니다.
        """
        result = ticket_orchestrator.handle_trigger(event)
        if result.status != "ignored":
            logger.debug(f"티켓 트리거 처리 결과: {result.status} ({event.get('ts')})")
