"""Contract read coordinator.

Drives ``greeting()`` reads off readiness transitions and makes sure a
response is only committed for the readiness window it was issued in.

Sequencing rule: every not-ready -> ready transition opens a new window
(a monotonically increasing counter). Each read is tagged with the window
that was open when it was issued, and its outcome is committed only if the
gate is still ready and the tag still equals the open window. Anything else
is discarded silently. In-flight provider calls are never cancelled; the
discard rule is the only cancellation there is.

There is no timeout: a provider call that never returns keeps ``loading``
set until readiness drops.
"""

import asyncio
import logging
from typing import Callable, Optional

from bytechu.contracts.wallet import OperationError, OperationSource, ReadResponse, ReadResult
from bytechu.errors import NotReady, ReadFailed, WalletGateError
from bytechu.services.error_channel import ErrorChannel
from bytechu.services.greeter import GreeterContract
from bytechu.services.readiness import ReadinessGate

logger = logging.getLogger(__name__)


class ContractReadCoordinator:
    """Window-tagged reads of the greeter contract."""

    def __init__(
        self,
        contract: GreeterContract,
        gate: ReadinessGate,
        errors: ErrorChannel,
    ):
        self._contract = contract
        self._gate = gate
        self._errors = errors
        self._window = 0
        self._latest_attempt = 0
        self._result: Optional[ReadResult] = None
        self._loading = False
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def window(self) -> int:
        """Identifier of the most recent readiness window."""
        return self._window

    @property
    def result(self) -> Optional[ReadResult]:
        return self._result

    @property
    def loading(self) -> bool:
        return self._loading

    def attach(self) -> None:
        """Start observing readiness transitions. Idempotent."""
        if self._unsubscribe is None:
            self._unsubscribe = self._gate.subscribe(self._on_readiness_changed)

    def close(self) -> None:
        """Stop observing readiness transitions."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_readiness_changed(self, ready: bool) -> None:
        if not ready:
            # Outstanding calls now belong to a closed window
            self._loading = False
            return

        self._window += 1
        logger.info("Readiness window %d opened - reading greeting", self._window)
        self._schedule_read()

    def _schedule_read(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop - automatic read for window %d skipped", self._window)
            return

        # Tag synchronously so the read belongs to the window that triggered it
        issued = self._issue()
        task = loop.create_task(self._complete(*issued))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _issue(self) -> tuple[int, int, int]:
        """Tag a new attempt with the open window; returns (window, attempt, token)."""
        token = self._errors.begin(OperationSource.READ)
        self._latest_attempt += 1
        self._loading = True
        return self._window, self._latest_attempt, token

    def _is_current(self, window: int) -> bool:
        return self._gate.ready and window == self._window

    def _settle(self, attempt: int) -> None:
        if attempt == self._latest_attempt:
            self._loading = False

    async def read(self) -> ReadResponse:
        """Read greeting() now.

        Allowed whenever the gate is ready, including while other reads are
        in flight; the last one to complete within the current window wins.
        """
        if not self._gate.ready:
            token = self._errors.begin(OperationSource.READ)
            error = NotReady()
            self._errors.fail(OperationSource.READ, token, error.kind, error.message)
            return ReadResponse(
                success=False,
                error=OperationError(source=OperationSource.READ, kind=error.kind, message=error.message),
            )

        return await self._complete(*self._issue())

    refresh = read

    async def _complete(self, window: int, attempt: int, token: int) -> ReadResponse:
        try:
            try:
                value = await self._contract.greeting()
            except WalletGateError:
                raise
            except Exception as e:
                raise ReadFailed(f"Failed to read greeting: {e}") from e

            if not self._is_current(window):
                logger.debug("Discarding greeting from closed window %d", window)
                return ReadResponse(success=False, discarded=True)

            # The committed value is the newest outcome in this window
            self._result = ReadResult(value=value, fetched_at=window)
            self._errors.clear(OperationSource.READ)
            logger.info("Greeting committed for window %d", window)
            return ReadResponse(success=True, result=self._result)

        except WalletGateError as e:
            if not self._is_current(window):
                logger.debug("Discarding read failure from closed window %d: %s", window, e.message)
                return ReadResponse(success=False, discarded=True)

            self._errors.fail(OperationSource.READ, token, e.kind, e.message)
            return ReadResponse(
                success=False,
                error=OperationError(source=OperationSource.READ, kind=e.kind, message=e.message),
            )

        finally:
            self._settle(attempt)

    async def wait_idle(self) -> None:
        """Wait for every scheduled read task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_pending(self) -> None:
        """Cancel scheduled read tasks (teardown only)."""
        for task in list(self._tasks):
            task.cancel()
