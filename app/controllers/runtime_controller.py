import logging

from app.app_state import app_state
from app.services.layer_status_machine import LayerStatus, LayerStatusMachine
from app.services.refresh_coordinator import RefreshCoordinator


class RuntimeStatusController:
    def __init__(self, state=None, machine=None, coordinator=None):
        self.state = state or app_state
        self.machine = machine or LayerStatusMachine()
        self.coordinator = coordinator or RefreshCoordinator()
        self._failure_reported = False
        self._settled = LayerStatus.UNKNOWN

    @property
    def status(self):
        """Last settled status; a query in flight keeps showing the previous result."""
        return self._settled

    @property
    def layer_active(self):
        return self._settled is LayerStatus.ACTIVE

    def begin_refresh(self, explicit=False):
        """Returns: ticket (int) or None when skipped (query outstanding or runtime unreachable)."""
        if not self.machine.can_check(explicit):
            return None
        ticket = self.coordinator.try_begin()
        if ticket is None:
            logging.debug("Runtime refresh skipped; previous query still running")
            return None
        self.machine.begin_check(explicit)
        return ticket

    def apply_result(self, ticket, runtime_state):
        """Mutates: runtime_state, resolution. Returns: False for a stale result."""
        if not self.coordinator.finish(ticket):
            return False
        if runtime_state.layer_active:
            self.machine.mark_active()
        else:
            self.machine.mark_inactive()
        self._settled = self.machine.state
        self.state.runtime_state = runtime_state
        self.state.resolution = runtime_state.resolution
        return True

    def apply_failure(self, ticket, message):
        """Mutates: runtime_state, resolution. Returns: False for a stale result."""
        if not self.coordinator.finish(ticket):
            return False
        logging.warning("OpenXR runtime unavailable: %s", message)
        self._settled = self.machine.mark_unreachable()
        self.state.runtime_state = None
        self.state.resolution = None
        return True

    def take_failure_report(self):
        """True the first time an unreachable runtime should be shown to the user."""
        if self._failure_reported or self.machine.state is not LayerStatus.UNREACHABLE:
            return False
        self._failure_reported = True
        return True

    def shutdown(self):
        self.coordinator.discard_pending()
