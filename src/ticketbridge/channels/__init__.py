"""채널 레지스트리 관리 모듈"""

from ticketbridge.channels.registry import ChannelRegistry
from ticketbridge.channels.scanner import MembershipScanner
from ticketbridge.channels.reconciler import ReconcileResult, RegistryReconciler

__all__ = [
    "ChannelRegistry",
    "MembershipScanner",
    "ReconcileResult",
    "RegistryReconciler",
]
