"""ticketbridge 슬랙 봇 메인

앱 초기화와 진입점만 담당합니다.
"""

import os
import signal
import threading

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_sdk import WebClient

from ticketbridge.config import Config
from ticketbridge.digest.scheduler import DailyScheduler
from ticketbridge.handlers import register_all_handlers
from ticketbridge.logging_config import setup_logging
from ticketbridge.service import BridgeService

EVENTS_PATH = "/slack/events"

# 로깅 설정
logger = setup_logging()


def create_app() -> App:
    """Slack Bolt 앱 생성

    모든 Web API 호출에 타임아웃이 걸리도록 WebClient를 직접 만들어 넘깁니다.
    HTTP 모드에서는 Bolt가 url_verification 챌린지 응답과 서명 검증을 처리합니다.
    """
    client = WebClient(token=Config.slack.bot_token, timeout=Config.slack.timeout)
    return App(
        client=client,
        signing_secret=Config.slack.signing_secret,
        logger=logger,
    )


def init_bot_user_id(app: App) -> str | None:
    """봇 사용자 ID 초기화 (BOT_USER_ID가 없으면 auth.test로 조회)"""
    if Config.slack.bot_user_id:
        return Config.slack.bot_user_id
    try:
        auth_result = app.client.auth_test()
        Config.slack.bot_user_id = auth_result["user_id"]
        logger.info(f"BOT_USER_ID: {Config.slack.bot_user_id}")
    except Exception as e:
        logger.error(f"봇 ID 조회 실패: {e}")
    return Config.slack.bot_user_id


def start_bootstrap(service: BridgeService) -> threading.Thread:
    """레지스트리 초기화를 백그라운드에서 시작 (이벤트 수신은 바로 가능)"""

    def run():
        try:
            channels = service.digest_job.bootstrap()
            logger.info(f"봇 초기화 완료: {len(channels)}개 채널 추적")
        except Exception as e:
            logger.exception(f"채널 레지스트리 초기화 실패: {e}")

    thread = threading.Thread(target=run, name="registry-bootstrap", daemon=True)
    thread.start()
    return thread


def main():
    """봇 메인 진입점"""
    Config.validate()

    logger.info("ticketbridge 봇을 시작합니다...")
    logger.info(f"LOG_PATH: {Config.get_log_path()}")
    logger.info(f"DATA_PATH: {Config.get_data_path()}")
    logger.info(f"TRACKED_USERS: {Config.tracking.tracked_users}")
    logger.info(f"DEBUG: {Config.debug}")

    app = create_app()
    bot_user_id = init_bot_user_id(app)

    service = BridgeService.from_config(app.client, bot_user_id)
    register_all_handlers(app, service.build_dependencies())

    scheduler = DailyScheduler(service.digest_job, Config.schedule.digest_time)

    def _signal_handler(signum, frame):
        """시그널 수신 시 스케줄러 정리 후 종료"""
        logger.info(f"시그널 수신: {signal.Signals(signum).name}")
        scheduler.stop()
        os._exit(0)

    signal.signal(signal.SIGINT, _signal_handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _signal_handler)

    start_bootstrap(service)
    scheduler.start()

    if Config.slack.app_token:
        handler = SocketModeHandler(app, Config.slack.app_token)
        handler.start()
    else:
        app.start(port=Config.port, path=EVENTS_PATH)


if __name__ == "__main__":
    main()
