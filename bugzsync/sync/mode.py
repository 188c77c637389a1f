"""Connectivity mode state machine using the transitions library.

Three states:
- online:   remote calls allowed
- offline:  "unplugged"; only the local store is used
- override: offline, but serving a request the user forced explicitly
            (e.g. a bug number typed by hand). Remote calls are allowed
            until the override ends and the mode drops back to offline.
            Plugging in during an override goes straight to online.

Usage:
    mode = ConnectivityMode(offline=True)
    with mode.external_override():
        assert mode.network_allowed
    mode.plug()
"""

import logging
from contextlib import contextmanager
from typing import Callable

from transitions import Machine

logger = logging.getLogger(__name__)


STATES = ["online", "offline", "override"]

TRANSITIONS = [
    {"trigger": "unplug", "source": "online", "dest": "offline"},
    {"trigger": "plug", "source": ["offline", "override"], "dest": "online"},
    {"trigger": "begin_override", "source": "offline", "dest": "override"},
    {"trigger": "end_override", "source": "override", "dest": "offline"},
]


class ConnectivityMode:
    """Online/offline state for one coordinator session."""

    def __init__(self, offline: bool = False, on_transition: Callable[[str, str, str], None] | None = None):
        """
        Args:
            offline: Start unplugged
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.on_transition = on_transition
        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="offline" if offline else "online",
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        if trigger in ("begin_override", "end_override"):
            logger.debug(f"[mode] {from_state} -> {to_state} ({trigger})")
        else:
            logger.info(f"[mode] {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    @property
    def offline(self) -> bool:
        """True when unplugged, including during an override."""
        return self.state in ("offline", "override")

    @property
    def network_allowed(self) -> bool:
        return self.state in ("online", "override")

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def go_offline(self) -> None:
        """Unplug. No-op if already offline."""
        if self.can("unplug"):
            self.unplug()

    def go_online(self) -> None:
        """Plug back in. No-op if already online."""
        if self.can("plug"):
            self.plug()

    @contextmanager
    def external_override(self):
        """Allow remote calls for the duration of an explicitly forced request."""
        if not self.can("begin_override"):
            yield
            return
        self.begin_override()
        try:
            yield
        finally:
            # plug() during the override already left it
            if self.state == "override":
                self.end_override()
