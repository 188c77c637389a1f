"""Tests for bugzsync.sync.mode module."""

import pytest
from transitions import MachineError

from bugzsync.sync.mode import ConnectivityMode, STATES, TRANSITIONS


class TestModeDefinitions:

    def test_states(self):
        assert set(STATES) == {"online", "offline", "override"}

    def test_override_only_entered_from_offline(self):
        sources = {t["source"] for t in TRANSITIONS if t["trigger"] == "begin_override"}
        assert sources == {"offline"}


class TestConnectivityMode:
    """Mode transitions."""

    def test_initial_online(self):
        mode = ConnectivityMode()
        assert mode.state == "online"
        assert mode.network_allowed is True
        assert mode.offline is False

    def test_initial_offline(self):
        mode = ConnectivityMode(offline=True)
        assert mode.state == "offline"
        assert mode.network_allowed is False

    def test_unplug_and_plug(self):
        mode = ConnectivityMode()
        mode.unplug()
        assert mode.offline is True
        mode.plug()
        assert mode.state == "online"

    def test_go_offline_is_idempotent(self):
        mode = ConnectivityMode(offline=True)
        mode.go_offline()
        assert mode.state == "offline"
        mode.go_online()
        mode.go_online()
        assert mode.state == "online"

    def test_invalid_trigger_raises(self):
        mode = ConnectivityMode()
        with pytest.raises(MachineError):
            mode.plug()

    def test_callback_receives_transition(self):
        seen = []
        mode = ConnectivityMode(on_transition=lambda *args: seen.append(args))
        mode.unplug()
        assert seen == [("online", "offline", "unplug")]


class TestExternalOverride:
    """Explicit requests may reach the network while unplugged."""

    def test_override_allows_network_then_restores(self):
        mode = ConnectivityMode(offline=True)
        with mode.external_override():
            assert mode.state == "override"
            assert mode.network_allowed is True
            assert mode.offline is True
        assert mode.state == "offline"
        assert mode.network_allowed is False

    def test_override_restored_after_exception(self):
        mode = ConnectivityMode(offline=True)
        with pytest.raises(RuntimeError):
            with mode.external_override():
                raise RuntimeError("fetch blew up")
        assert mode.state == "offline"

    def test_override_noop_when_online(self):
        mode = ConnectivityMode()
        with mode.external_override():
            assert mode.state == "online"
        assert mode.state == "online"

    def test_nested_override(self):
        mode = ConnectivityMode(offline=True)
        with mode.external_override():
            with mode.external_override():
                assert mode.state == "override"
            assert mode.state == "override"
        assert mode.state == "offline"

    def test_plug_during_override_goes_online(self):
        mode = ConnectivityMode(offline=True)
        with mode.external_override():
            mode.go_online()
            assert mode.state == "online"
        assert mode.state == "online"
        assert mode.offline is False

    def test_plug_trigger_during_override(self):
        seen = []
        mode = ConnectivityMode(offline=True, on_transition=lambda *args: seen.append(args))
        with mode.external_override():
            mode.plug()
        assert seen[-1] == ("override", "online", "plug")
        assert mode.state == "online"
