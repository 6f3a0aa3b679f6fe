"""EditorGuard: structural guarantee that editor and menu end up closed.

Leaving an editor or action menu open after a record is processed makes the
next record operate on a stale surface. Rather than closing the surface in
every abort branch of the state machine, the guard encodes the post-condition
structurally: whatever happens inside the ``with`` block (normal return,
abort, exception), ``__exit__`` closes anything still open.
"""

import logging
from types import TracebackType

from retarget.contracts import RecordRef, SurfaceCleanupError, SurfaceDriver
from retarget.engine.clock import Clock
from retarget.engine.waits import poll_until

logger = logging.getLogger(__name__)


class EditorGuard:
    """Context manager that leaves the editor and the record's menu closed.

    Usage::

        with EditorGuard(driver, record, clock=clock, ...) as guard:
            # ... open menu, open editor, mutate, save ...
            return outcome

    On a normal exit, failing to close raises SurfaceCleanupError; the
    state machine logs it and keeps the outcome it already decided. When an
    exception is already propagating, cleanup failures are logged and the
    original exception is left untouched.
    """

    __slots__ = (
        "_clock",
        "_close_timeout",
        "_driver",
        "_forced_close",
        "_poll_interval",
        "_record",
    )

    def __init__(
        self,
        driver: SurfaceDriver,
        record: RecordRef,
        *,
        clock: Clock,
        close_timeout: float,
        poll_interval: float,
    ) -> None:
        self._driver = driver
        self._record = record
        self._clock = clock
        self._close_timeout = close_timeout
        self._poll_interval = poll_interval
        self._forced_close = False

    # -- context manager protocol ------------------------------------------

    def __enter__(self) -> "EditorGuard":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.ensure_closed()
            return

        try:
            self.ensure_closed()
        except Exception:
            # Don't mask the original exception: the caller needs to see it.
            logger.error(
                "EditorGuard: cleanup of record %s failed while handling %s",
                self._record.index,
                exc_type.__name__,
                exc_info=True,
            )

    # -- public API --------------------------------------------------------

    @property
    def forced_close(self) -> bool:
        """Whether cleanup had to close something left open."""
        return self._forced_close

    def ensure_closed(self) -> None:
        """Close the editor and the record's menu if either is still open.

        Raises:
            SurfaceCleanupError: If either is still open after the close wait.
        """
        driver = self._driver
        record = self._record

        if driver.is_editor_open():
            self._forced_close = True
            driver.force_close_editor()
        if driver.is_menu_open(record):
            self._forced_close = True
            driver.close_action_menu(record)

        if not self._forced_close:
            return

        closed = poll_until(
            lambda: not driver.is_editor_open() and not driver.is_menu_open(record),
            timeout=self._close_timeout,
            interval=self._poll_interval,
            clock=self._clock,
        )
        if not closed:
            raise SurfaceCleanupError(
                record.index,
                editor_open=driver.is_editor_open(),
                menu_open=driver.is_menu_open(record),
            )
