# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-request cancellation context.

A RequestContext carries a "done" signal and an optional deadline. It governs
the transport call (its timeout is capped by the remaining time), the backoff
wait between attempts and bearer token providers. Derived contexts observe
their parent's cancellation and never outlive its deadline.
"""

from __future__ import annotations

import threading
import time
import weakref


class RequestContext:
    def __init__(self, *, deadline: float | None = None, parent: RequestContext | None = None):
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline
        self._parent = parent
        self._done = threading.Event()
        self._children: weakref.WeakSet[RequestContext] = weakref.WeakSet()
        self._lock = threading.Lock()
        if parent is not None:
            parent._register(self)

    def _register(self, child: RequestContext) -> None:
        with self._lock:
            self._children.add(child)
            done = self._done.is_set()
        if done:
            child.cancel()

    def cancel(self) -> None:
        """Signal cancellation to this context and every context derived from it."""
        with self._lock:
            self._done.set()
            children = list(self._children)
        for child in children:
            child.cancel()

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called or the deadline elapsed."""
        return self._done.is_set() or self.expired

    @property
    def reason(self) -> str | None:
        """Why the context finished: None while active."""
        if self._done.is_set():
            return "context canceled"
        if self.expired:
            return "context deadline exceeded"
        return None

    def wait(self, seconds: float) -> bool:
        """
        Sleep for ``seconds`` unless the context finishes first.

        Returns True when the full duration elapsed and False when the wait was
        cut short by cancellation or the deadline. Non-positive durations return
        immediately without suspending.
        """
        if seconds <= 0:
            return not self.cancelled
        if self.cancelled:
            return False
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            while not self._done.is_set() and not self.expired:
                self._done.wait(self.remaining())
            return False
        return not self._done.wait(seconds)

    def with_timeout(self, seconds: float) -> RequestContext:
        """Derive a child context whose deadline is ``seconds`` from now."""
        return RequestContext(deadline=time.monotonic() + seconds, parent=self)

    def child(self) -> RequestContext:
        """Derive a child context that can be cancelled independently."""
        return RequestContext(parent=self)

    def __repr__(self) -> str:
        return f"RequestContext(cancelled={self.cancelled}, remaining={self.remaining()})"


def background() -> RequestContext:
    """Return a fresh context that is never cancelled on its own."""
    return RequestContext()


def timeout_context(seconds: float, parent: RequestContext | None = None) -> RequestContext:
    return (parent or background()).with_timeout(seconds)


__all__ = ["RequestContext", "background", "timeout_context"]
