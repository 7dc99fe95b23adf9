"""일일 정비 작업 스케줄러

threading.Timer로 매일 지정한 로컬 시각(HH:MM)에 DailyDigestJob을 실행합니다.
작업 결과는 로그로 남기고, 실패 여부와 관계없이 다음 날 실행을 예약합니다.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable

from ticketbridge.digest.job import DailyDigestJob

logger = logging.getLogger(__name__)


def parse_time_of_day(value: str) -> tuple[int, int]:
    """'HH:MM' 문자열을 (hour, minute)로 변환

    Raises:
        ValueError: 형식이 잘못된 경우
    """
    hour_str, sep, minute_str = value.strip().partition(":")
    if not sep:
        raise ValueError(f"HH:MM 형식이 아님: {value!r}")
    hour, minute = int(hour_str), int(minute_str)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"시각 범위 오류: {value!r}")
    return hour, minute


def seconds_until(now: datetime, hour: int, minute: int) -> float:
    """now 이후 다음 hour:minute까지 남은 초 (지났으면 다음 날)"""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class DailyScheduler:
    """매일 같은 시각에 정비 작업을 실행하는 스케줄러"""

    def __init__(
        self,
        job: DailyDigestJob,
        time_of_day: str = "14:22",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.job = job
        self.hour, self.minute = parse_time_of_day(time_of_day)
        self.clock = clock

        self._timer: threading.Timer | None = None
        self._running = False

    def start(self) -> None:
        """스케줄러를 시작합니다."""
        if self._running:
            return
        self._running = True
        self._schedule_next()

    def stop(self) -> None:
        """스케줄러를 중지합니다."""
        self._running = False
        if self._timer:
            self._timer.cancel()
            self._timer = None
        logger.info("일일 정비 스케줄러 중지")

    def _schedule_next(self) -> None:
        """다음 실행을 예약합니다."""
        if not self._running:
            return
        delay = seconds_until(self.clock(), self.hour, self.minute)
        self._timer = threading.Timer(delay, self._tick)
        self._timer.daemon = True
        self._timer.start()
        logger.info(f"다음 일일 정비 예약: {self.hour:02d}:{self.minute:02d} ({delay:.0f}초 후)")

    def _tick(self) -> None:
        """예약 시각 도달: 작업 실행 후 다음 실행 예약"""
        try:
            result = self.job.run()
            if result.skipped:
                logger.warning("일일 정비 작업 건너뜀 (이전 실행 진행 중)")
            elif result.errors:
                logger.error(f"일일 정비 작업 일부 실패: {result.errors}")
            else:
                logger.info("일일 정비 작업 성공")
        except Exception as e:
            logger.exception(f"일일 정비 작업 오류: {e}")
        finally:
            self._schedule_next()
