"""로깅 설정

로그는 LOG_PATH 아래 일자별 파일(bot_YYYYMMDD.log)과 표준 출력에 함께 남습니다.

레벨 기준:
- exception: 티켓 생성 파이프라인, 일일 정비 단계처럼 스택 트레이스가 필요한 예상 밖 오류
- error: Slack/Jira/OpenAI 호출 실패, 레지스트리 파일 읽기/쓰기 실패
- warning: 보고 채널·OpenAI 키 같은 선택 설정 누락, 정비 작업 중복 실행
- info: 채널 가입/제거, 티켓 생성, 정비 작업 시작/완료
- debug: 페이지네이션 커서, 중복 이벤트
"""

import logging
from datetime import datetime
from pathlib import Path

from ticketbridge.config import Config


def setup_logging() -> logging.Logger:
    """로깅 설정 및 로거 반환"""
    log_dir = Path(Config.get_log_path())
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / f"bot_{datetime.now().strftime('%Y%m%d')}.log"

    logging.basicConfig(
        level=logging.DEBUG if Config.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler()
        ]
    )

    # urllib3 HTTP 요청 로그 제어 (DEBUG=true일 때만 출력)
    if not Config.debug:
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger("ticketbridge")
