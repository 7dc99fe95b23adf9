"""일일 정비/요약 작업 모듈"""

from ticketbridge.digest.job import DailyDigestJob, DigestRunResult
from ticketbridge.digest.scheduler import DailyScheduler

__all__ = [
    "DailyDigestJob",
    "DailyScheduler",
    "DigestRunResult",
]
