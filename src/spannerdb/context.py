"""
Per-call cancellation and deadline context.

Every public connection operation accepts a CallContext. The strategy layer
checks it before issuing a query and on every streamed row, and hands the
remaining time to the Spanner client as the RPC timeout.

Usage:
    ctx = CallContext.with_timeout(5.0)
    schema = cn.get_schema('Singers', ctx=ctx)

    # from another thread
    ctx.cancel()
"""
import threading
import time
from typing import Self

from spannerdb.exceptions import DeadlineExceeded, OperationCancelled

__all__ = ['CallContext', 'background']


class CallContext:
    """Cancellation flag plus an optional monotonic deadline.
    """

    def __init__(self, deadline: float | None = None,
                 parent: 'CallContext | None' = None) -> None:
        self.deadline = deadline
        self.parent = parent
        self._cancelled = threading.Event()
        self._reason: str | None = None

    @classmethod
    def with_timeout(cls, seconds: float | None,
                     parent: 'CallContext | None' = None) -> Self:
        """Create a context expiring ``seconds`` from now.

        A None or non-positive timeout means no deadline of its own.
        """
        deadline = time.monotonic() + seconds if seconds and seconds > 0 else None
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        return cls(deadline=deadline, parent=parent)

    def cancel(self, reason: str | None = None) -> None:
        self._reason = reason
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self.parent is not None and self.parent.cancelled

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None without a deadline.
        """
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the context is cancelled or past its deadline.

        Raises
            OperationCancelled: If cancel() was called on this or a parent context
            DeadlineExceeded: If the deadline has passed
        """
        if self.cancelled:
            raise OperationCancelled(self._reason or 'Operation cancelled')
        if self.expired:
            raise DeadlineExceeded('Deadline exceeded')

    def __repr__(self) -> str:
        return f'CallContext(remaining={self.remaining()!r}, cancelled={self.cancelled})'


def background() -> CallContext:
    """Context that is never cancelled and has no deadline.
    """
    return CallContext()
