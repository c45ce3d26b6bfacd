"""Readiness gate: connected AND on the target chain."""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TransitionListener = Callable[[bool], None]


def is_ready(account: Optional[str], chain_id: Optional[int], target_chain_id: int) -> bool:
    """Return True when an account is present and the chain is the target."""
    return account is not None and chain_id == target_chain_id


class ReadinessGate:
    """Emits transitions of the derived readiness value.

    The gate keeps no state of its own beyond the last value it reported:
    inputs are read through the supplied getters every time ``recompute()``
    runs, and subscribers hear only about flips, not about field churn that
    leaves readiness unchanged.
    """

    def __init__(
        self,
        get_account: Callable[[], Optional[str]],
        get_chain_id: Callable[[], Optional[int]],
        target_chain_id: int,
    ):
        self._get_account = get_account
        self._get_chain_id = get_chain_id
        self.target_chain_id = target_chain_id
        self._last = False
        self._listeners: list[TransitionListener] = []

    @property
    def ready(self) -> bool:
        return is_ready(self._get_account(), self._get_chain_id(), self.target_chain_id)

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """Register a transition listener; returns its unsubscribe handle."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def recompute(self) -> None:
        """Re-evaluate readiness and notify listeners if it flipped."""
        ready = self.ready
        if ready == self._last:
            return

        self._last = ready
        logger.info("Readiness changed: %s", "ready" if ready else "not ready")
        for listener in list(self._listeners):
            listener(ready)
