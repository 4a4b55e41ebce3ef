import pytest

import conftest


class _Item:
    def __init__(self, live: bool):
        # ディレクトリ名 e2e は marker でなくても keywords に入る
        self.keywords = {"e2e": 1, "tests": 1}
        self._live = live
        self.added = []

    def get_closest_marker(self, name):
        return pytest.mark.e2e.mark if self._live and name == "e2e" else None

    def add_marker(self, marker):
        self.added.append(marker)


def test_only_marked_tests_are_skipped_without_live_flag(monkeypatch):
    monkeypatch.delenv("E2E_LIVE", raising=False)
    offline, live = _Item(live=False), _Item(live=True)

    conftest.pytest_collection_modifyitems(None, [offline, live])

    assert offline.added == []
    assert [m.mark.name for m in live.added] == ["skip"]


def test_live_flag_runs_everything(monkeypatch):
    monkeypatch.setenv("E2E_LIVE", "1")
    live = _Item(live=True)

    conftest.pytest_collection_modifyitems(None, [live])

    assert live.added == []


def test_this_offline_test_is_not_skipped(request):
    assert request.node.get_closest_marker("e2e") is None
    assert request.node.get_closest_marker("skip") is None
