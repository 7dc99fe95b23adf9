"""멘션 추적 모듈"""

from ticketbridge.mentions.aggregator import MentionAggregator
from ticketbridge.mentions.parser import build_thread_link, find_mentions

__all__ = [
    "MentionAggregator",
    "build_thread_link",
    "find_mentions",
]
