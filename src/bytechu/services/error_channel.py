"""Single error slot shared by connect, switch-chain and read operations."""

import logging
from typing import Callable, Optional

from bytechu.contracts.wallet import ErrorKind, OperationError, OperationSource

logger = logging.getLogger(__name__)

ErrorListener = Callable[[Optional[OperationError]], None]


class ErrorChannel:
    """Holds the most recent operation error, if any.

    Each operation reports its lifecycle with an attempt token:

    - ``begin()`` clears the slot and makes the new attempt the newest one
      for that source.
    - ``fail()`` writes the slot only for the newest attempt of its source.
    - ``succeed()`` clears the slot only if it holds an error from the same
      source and the attempt is still the newest.

    - ``clear(source)`` drops an error from ``source`` whatever the attempt.

    Through ``fail()`` and ``succeed()`` a superseded attempt never touches
    the slot, and one operation's success never clears another operation's
    error.
    """

    def __init__(self) -> None:
        self._error: Optional[OperationError] = None
        self._attempts: dict[OperationSource, int] = {source: 0 for source in OperationSource}
        self._listeners: list[ErrorListener] = []

    @property
    def error(self) -> Optional[OperationError]:
        return self._error

    def add_listener(self, listener: ErrorListener) -> None:
        self._listeners.append(listener)

    def is_current(self, source: OperationSource, attempt: int) -> bool:
        return self._attempts[source] == attempt

    def begin(self, source: OperationSource) -> int:
        """Register a new attempt of ``source`` and clear the slot."""
        self._attempts[source] += 1
        self._set(None)
        return self._attempts[source]

    def fail(self, source: OperationSource, attempt: int, kind: ErrorKind, message: str) -> bool:
        """Record a failure; returns False if the attempt was superseded."""
        if not self.is_current(source, attempt):
            logger.debug("Dropping superseded %s failure: %s", source.value, message)
            return False
        self._set(OperationError(source=source, kind=kind, message=message))
        return True

    def succeed(self, source: OperationSource, attempt: int) -> None:
        if self._error is not None and self._error.source == source and self.is_current(source, attempt):
            self._set(None)

    def clear(self, source: Optional[OperationSource] = None) -> None:
        """Clear the slot, or only an error from ``source`` when given."""
        if source is None or (self._error is not None and self._error.source == source):
            self._set(None)

    def _set(self, error: Optional[OperationError]) -> None:
        if error == self._error:
            return
        self._error = error
        if error is not None:
            logger.warning("%s failed (%s): %s", error.source.value, error.kind.value, error.message)
        for listener in list(self._listeners):
            listener(error)
