"""
wordwatch/ingestion/debounce.py
───────────────────────────────
Per-key debouncing of filesystem events.

`Debouncer.schedule(key, delay, action)` starts a timer for *key*; a second
call for the same key before the timer elapses cancels the first one, so a
burst of events collapses into a single call of the last action.

Each scheduled wait is a DebounceEntry whose state moves exactly once from
PENDING to CANCELLED or FIRED under its own lock, which makes "cancel" and
"fire" mutually exclusive even when a timer thread is already waking up.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from wordwatch.config import CONFIG

LOG = logging.getLogger(__name__)

PENDING, CANCELLED, FIRED = "pending", "cancelled", "fired"

TimerFactory = Callable[..., threading.Timer]


class DebounceEntry:
    """Cancellation handle for one scheduled action."""

    def __init__(self, key: str, previous: Optional["DebounceEntry"] = None):
        self.key = key
        self.timer: Optional[threading.Timer] = None
        # entry whose action may still be running; ours waits for it
        self.previous = previous
        self._state = PENDING
        self._lock = threading.Lock()
        self._done = threading.Event()

    @property
    def state(self) -> str:
        with self._lock:
            return self._state

    def cancel(self) -> bool:
        """Cancel if still pending. Returns False once the action has fired."""
        with self._lock:
            if self._state != PENDING:
                return False
            self._state = CANCELLED
        self._done.set()
        if self.timer is not None:
            self.timer.cancel()
        return True

    def claim(self) -> bool:
        """Move PENDING -> FIRED; only the winner may run the action."""
        with self._lock:
            if self._state != PENDING:
                return False
            self._state = FIRED
            return True

    def finish(self) -> None:
        self._done.set()

    @property
    def running(self) -> bool:
        """True between a successful claim() and finish()."""
        return self.state == FIRED and not self._done.is_set()

    def wait_done(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)


class Debouncer:
    """
    Coalesce rapid triggers per key into a single delayed action.

    Args:
        delay: Default wait in seconds (defaults to debounce.delay_seconds)
        timer_factory: Callable with the threading.Timer signature
    """

    def __init__(self, delay: Optional[float] = None,
                 timer_factory: TimerFactory = threading.Timer):
        self.delay = delay if delay is not None else CONFIG.get("debounce.delay_seconds", 4.0)
        self._timer_factory = timer_factory
        self._entries: Dict[str, DebounceEntry] = {}
        self._lock = threading.Lock()

    def schedule(self, key: str, delay: Optional[float], action: Callable[[], None]) -> None:
        """Schedule (or reschedule) *action* for *key* after *delay* seconds."""
        delay = self.delay if delay is None else delay
        with self._lock:
            previous = self._entries.get(key)
            waits_on = None
            if previous is not None:
                if previous.cancel():
                    LOG.debug("Debounce reset for: %s", key)
                    waits_on = previous.previous
                    if waits_on is not None and not waits_on.running:
                        waits_on = None
                else:
                    # already fired and still running
                    waits_on = previous

            entry = DebounceEntry(key, previous=waits_on)
            timer = self._timer_factory(delay, self._fire, args=(entry, action))
            timer.daemon = True
            entry.timer = timer
            self._entries[key] = entry
            timer.start()

    def _fire(self, entry: DebounceEntry, action: Callable[[], None]) -> None:
        if not entry.claim():
            return

        try:
            if entry.previous is not None:
                entry.previous.wait_done()
                entry.previous = None
            LOG.debug("Debounce fired for: %s", entry.key)
            action()
        except Exception:
            LOG.exception("Debounced action failed for: %s", entry.key)
        finally:
            entry.finish()
            with self._lock:
                if self._entries.get(entry.key) is entry:
                    del self._entries[entry.key]

    def _drop(self, key: str, entry: DebounceEntry) -> None:
        # Caller holds self._lock. A still-running predecessor stays visible
        # so the next schedule() for this key waits for it; a finished one
        # already skipped its own removal in _fire and must not come back.
        if entry.previous is not None and entry.previous.running:
            self._entries[key] = entry.previous
        else:
            del self._entries[key]

    def cancel(self, key: str) -> bool:
        """Cancel the pending wait for *key*; False if nothing was pending."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.cancel():
                return False
            self._drop(key, entry)
            return True

    def cancel_all(self) -> int:
        """Cancel every pending wait. Running actions are left to finish."""
        with self._lock:
            cancelled = [(k, e) for k, e in self._entries.items() if e.cancel()]
            for key, entry in cancelled:
                self._drop(key, entry)
        if cancelled:
            LOG.info("Cancelled %d pending debounce timer(s)", len(cancelled))
        return len(cancelled)

    def pending_keys(self) -> List[str]:
        with self._lock:
            return [k for k, e in self._entries.items() if e.state == PENDING]

    @property
    def pending_count(self) -> int:
        return len(self.pending_keys())
