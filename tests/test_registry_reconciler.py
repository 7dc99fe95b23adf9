"""RegistryReconciler 테스트"""

from unittest.mock import MagicMock

import pytest

from ticketbridge.channels.reconciler import RegistryReconciler
from ticketbridge.channels.registry import ChannelRegistry
from ticketbridge.channels.scanner import MembershipScanner

TRACKED = {"P1"}


@pytest.fixture
def registry(tmp_path):
    return ChannelRegistry(tmp_path)


def _reconciler(registry, directory, scanner=None):
    return RegistryReconciler(
        registry=registry,
        directory=directory,
        scanner=scanner or MagicMock(spec=MembershipScanner),
        tracked_users=TRACKED,
    )


class TestReconcile:
    """reconcile 테스트"""

    def test_gain_and_loss_in_same_cycle(self, registry, directory):
        """추적 대상이 새로 들어온 채널은 추가, 유일한 추적 대상이 떠난 채널은 제거"""
        registry.save({"C_LOST"})
        directory.iter_channels.return_value = iter([
            {"id": "C_GAINED", "name": "gained"},
            {"id": "C_LOST", "name": "lost"},
        ])
        members = {"C_GAINED": ["P1", "U2"], "C_LOST": ["U2"]}
        directory.channel_members.side_effect = lambda cid: members[cid]

        result = _reconciler(registry, directory).reconcile()

        assert "C_GAINED" in result.channels
        assert "C_LOST" not in result.channels
        assert result.added == ["C_GAINED"]
        assert result.removed == ["C_LOST"]
        assert result.saved is True
        assert ChannelRegistry(registry.data_dir).load() == {"C_GAINED"}

    def test_joined_channel_without_tracked_person_is_pruned(self, registry, directory):
        """새로 가입한 채널도 같은 주기의 정리 단계에서 검사됨"""
        directory.iter_channels.return_value = iter([{"id": "C_NEW"}])
        directory.channel_members.return_value = ["U2"]

        result = _reconciler(registry, directory).reconcile()

        directory.join_channel.assert_called_once_with("C_NEW")
        assert result.added == ["C_NEW"]
        assert result.removed == ["C_NEW"]
        assert result.channels == set()

    def test_join_new_before_prune(self, registry, directory):
        """가입 단계가 정리 단계보다 먼저 실행됨"""
        calls = []
        directory.iter_channels.side_effect = lambda: calls.append("list") or iter([])
        registry.save({"C1"})
        directory.channel_members.side_effect = lambda cid: calls.append("members") or ["P1"]

        _reconciler(registry, directory).reconcile()
        assert calls == ["list", "members"]

    def test_archived_channels_not_joined(self, registry, directory):
        """보관 채널은 가입하지 않음"""
        directory.iter_channels.return_value = iter([{"id": "C1", "is_archived": True}])

        result = _reconciler(registry, directory).reconcile()

        directory.join_channel.assert_not_called()
        assert result.added == []

    def test_already_member_channel_added_without_join(self, registry, directory):
        """이미 멤버인 채널은 가입 호출 없이 추가"""
        directory.iter_channels.return_value = iter([{"id": "C1", "is_member": True}])
        directory.channel_members.return_value = ["P1"]

        result = _reconciler(registry, directory).reconcile()

        directory.join_channel.assert_not_called()
        assert result.channels == {"C1"}

    def test_join_failure_not_added(self, registry, directory, slack_error):
        """가입 실패한 채널은 추가하지 않음"""
        directory.iter_channels.return_value = iter([{"id": "C1"}])
        directory.join_channel.side_effect = slack_error("method_not_supported_for_channel_type")

        result = _reconciler(registry, directory).reconcile()

        assert result.added == []
        assert result.channels == set()

    def test_transient_member_failure_keeps_channel(self, registry, directory, slack_error):
        """일시적 오류(레이트 리밋 등)면 채널 유지"""
        registry.save({"C1"})
        directory.iter_channels.return_value = iter([])
        directory.channel_members.side_effect = slack_error("ratelimited")

        result = _reconciler(registry, directory).reconcile()

        assert result.channels == {"C1"}
        assert result.kept_on_error == ["C1"]
        assert result.removed == []

    def test_network_failure_keeps_channel(self, registry, directory):
        """Slack 오류가 아닌 예외도 채널 유지"""
        registry.save({"C1"})
        directory.iter_channels.return_value = iter([])
        directory.channel_members.side_effect = TimeoutError("timed out")

        result = _reconciler(registry, directory).reconcile()
        assert result.channels == {"C1"}

    def test_channel_not_found_prunes(self, registry, directory, slack_error):
        """채널이 없거나 접근 불가로 확정되면 제거"""
        registry.save({"C1", "C2"})
        directory.iter_channels.return_value = iter([])

        def members(cid):
            if cid == "C1":
                raise slack_error("channel_not_found")
            return ["P1"]

        directory.channel_members.side_effect = members
        result = _reconciler(registry, directory).reconcile()

        assert result.channels == {"C2"}
        assert result.removed == ["C1"]

    def test_listing_failure_still_prunes_and_saves(self, registry, directory, slack_error):
        """채널 목록 조회 실패해도 정리 단계와 저장은 진행"""
        registry.save({"C1"})
        directory.iter_channels.side_effect = slack_error("ratelimited")
        directory.channel_members.return_value = ["U2"]

        result = _reconciler(registry, directory).reconcile()

        assert result.channels == set()
        assert result.saved is True


class TestBootstrap:
    """부팅 시 레지스트리 초기화 테스트"""

    def test_absent_file_triggers_full_scan(self, registry, directory):
        """레지스트리 파일이 없으면 전체 스캔 후 저장"""
        scanner = MagicMock(spec=MembershipScanner)
        scanner.scan_for_scope.return_value = {"C1", "C2"}

        channels = _reconciler(registry, directory, scanner).bootstrap()

        assert channels == {"C1", "C2"}
        scanner.scan_for_scope.assert_called_once()
        assert ChannelRegistry(registry.data_dir).load() == {"C1", "C2"}

    def test_existing_registry_skips_scan(self, registry, directory):
        """저장된 레지스트리가 있으면 스캔하지 않음"""
        registry.save({"C1"})
        scanner = MagicMock(spec=MembershipScanner)

        fresh = ChannelRegistry(registry.data_dir)
        channels = _reconciler(fresh, directory, scanner).bootstrap()

        assert channels == {"C1"}
        scanner.scan_for_scope.assert_not_called()
