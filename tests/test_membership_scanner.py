"""MembershipScanner 테스트"""

from unittest.mock import MagicMock

from ticketbridge.channels.scanner import MembershipScanner, has_tracked_member
from ticketbridge.slack.directory import SlackDirectory

BOT = "UBOT"
TRACKED = {"P1", "P2"}


def _scanner(directory):
    return MembershipScanner(directory, bot_user_id=BOT, tracked_users=TRACKED)


class TestHasTrackedMember:
    """추적 대상 포함 여부 판단"""

    def test_present(self):
        assert has_tracked_member(["U1", "P2"], TRACKED) is True

    def test_absent(self):
        assert has_tracked_member(["U1", "U2"], TRACKED) is False

    def test_empty_members(self):
        assert has_tracked_member([], TRACKED) is False


class TestScanForScope:
    """scan_for_scope 테스트"""

    def test_includes_only_channels_with_tracked_members(self, directory):
        """추적 대상이 있는 채널만 포함"""
        directory.iter_channels.return_value = iter([
            {"id": "C1", "name": "with-p1"},
            {"id": "C2", "name": "nobody"},
        ])
        members = {"C1": [BOT, "P1"], "C2": [BOT, "U9"]}
        directory.channel_members.side_effect = lambda cid: members[cid]

        assert _scanner(directory).scan_for_scope() == {"C1"}

    def test_archived_channels_excluded(self, directory):
        """보관 채널은 추적 대상이 있어도 제외, 멤버 조회도 하지 않음"""
        directory.iter_channels.return_value = iter([
            {"id": "C1", "is_archived": True},
        ])
        directory.channel_members.return_value = [BOT, "P1"]

        assert _scanner(directory).scan_for_scope() == set()
        directory.channel_members.assert_not_called()

    def test_joins_when_bot_absent(self, directory):
        """봇이 멤버가 아니면 가입"""
        directory.iter_channels.return_value = iter([{"id": "C1"}])
        directory.channel_members.return_value = ["P1"]

        assert _scanner(directory).scan_for_scope() == {"C1"}
        directory.join_channel.assert_called_once_with("C1")

    def test_does_not_join_when_bot_present(self, directory):
        """봇이 이미 멤버면 가입하지 않음"""
        directory.iter_channels.return_value = iter([{"id": "C1"}])
        directory.channel_members.return_value = [BOT, "P1"]

        _scanner(directory).scan_for_scope()
        directory.join_channel.assert_not_called()

    def test_join_failure_skips_channel(self, directory, slack_error):
        """가입 실패한 채널은 결과에서 제외하고 스캔은 계속"""
        directory.iter_channels.return_value = iter([{"id": "C1"}, {"id": "C2"}])
        directory.channel_members.return_value = ["P1"]
        directory.join_channel.side_effect = [slack_error("method_not_supported_for_channel_type"), None]

        assert _scanner(directory).scan_for_scope() == {"C2"}

    def test_member_lookup_failure_skips_channel(self, directory, slack_error):
        """멤버 조회 실패한 채널만 건너뜀"""
        directory.iter_channels.return_value = iter([{"id": "C1"}, {"id": "C2"}])

        def members(cid):
            if cid == "C1":
                raise slack_error("ratelimited")
            return [BOT, "P2"]

        directory.channel_members.side_effect = members
        assert _scanner(directory).scan_for_scope() == {"C2"}

    def test_listing_failure_returns_partial_result(self, directory, slack_error):
        """채널 목록 조회가 중간에 실패하면 그때까지의 결과 반환"""

        def channels():
            yield {"id": "C1"}
            raise slack_error("ratelimited")

        directory.iter_channels.return_value = channels()
        directory.channel_members.return_value = [BOT, "P1"]

        assert _scanner(directory).scan_for_scope() == {"C1"}

    def test_unknown_bot_id_joins_by_listing_flag(self, directory):
        """봇 ID를 모르면 채널 목록의 is_member로 가입 여부 판단"""
        directory.iter_channels.return_value = iter([
            {"id": "C1", "is_member": False},
            {"id": "C2", "is_member": True},
        ])
        directory.channel_members.return_value = ["P1"]

        scanner = MembershipScanner(directory, bot_user_id=None, tracked_users=TRACKED)
        assert scanner.scan_for_scope() == {"C1", "C2"}

        directory.join_channel.assert_called_once_with("C1")
        directory.channel_info.assert_not_called()

    def test_unknown_bot_id_without_flag_uses_channel_info(self, directory):
        """목록에 is_member가 없으면 channel_info로 확인"""
        directory.iter_channels.return_value = iter([{"id": "C1"}])
        directory.channel_members.return_value = ["P1"]
        directory.channel_info.return_value = {"is_archived": False, "is_member": False}

        scanner = MembershipScanner(directory, bot_user_id=None, tracked_users=TRACKED)
        assert scanner.scan_for_scope() == {"C1"}

        directory.channel_info.assert_called_once_with("C1")
        directory.join_channel.assert_called_once_with("C1")

    def test_unknown_bot_id_join_failure_excluded(self, directory, slack_error):
        """봇 ID를 모르는 상태에서 가입 실패한 채널은 제외"""
        directory.iter_channels.return_value = iter([{"id": "C1", "is_member": False}])
        directory.channel_members.return_value = ["P1"]
        directory.join_channel.side_effect = slack_error("not_allowed")

        scanner = MembershipScanner(directory, bot_user_id=None, tracked_users=TRACKED)
        assert scanner.scan_for_scope() == set()

    def test_tracked_override(self, directory):
        """인자로 넘긴 추적 대상이 우선"""
        directory.iter_channels.return_value = iter([{"id": "C1"}])
        directory.channel_members.return_value = [BOT, "P9"]

        assert _scanner(directory).scan_for_scope({"P9"}) == {"C1"}


class TestScanPagination:
    """채널 목록 페이지네이션 테스트 (실제 SlackDirectory 사용)"""

    def test_channels_from_all_three_pages(self):
        """3페이지로 나뉜 채널 목록을 끝까지 따라감"""
        client = MagicMock()
        client.conversations_list.side_effect = [
            {"channels": [{"id": "C1"}], "response_metadata": {"next_cursor": "page2"}},
            {"channels": [{"id": "C2"}], "response_metadata": {"next_cursor": "page3"}},
            {"channels": [{"id": "C3"}], "response_metadata": {"next_cursor": ""}},
        ]
        client.conversations_members.return_value = {
            "members": [BOT, "P1"],
            "response_metadata": {"next_cursor": ""},
        }

        scanner = MembershipScanner(SlackDirectory(client), BOT, TRACKED)
        assert scanner.scan_for_scope() == {"C1", "C2", "C3"}

        cursors = [c.kwargs["cursor"] for c in client.conversations_list.call_args_list]
        assert cursors == [None, "page2", "page3"]
