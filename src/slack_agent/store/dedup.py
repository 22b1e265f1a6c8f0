"""In-memory duplicate suppression for at-least-once Slack event delivery.

Slack may redeliver an event (retries, reconnects) and sends both `message`
and `app_mention` for the same mention. The guard remembers when each message
fingerprint was last accepted and drops repeats inside a short window.
"""

import threading
import time
from typing import Dict, Optional
from ..log import get_logger

logger = get_logger("dedup")

SUPPRESSION_WINDOW = 30.0
RETENTION_WINDOW = 10 * 60.0
SWEEP_INTERVAL = 5 * 60.0

class DedupGuard:
    def __init__(
        self,
        suppression_window: float = SUPPRESSION_WINDOW,
        retention_window: float = RETENTION_WINDOW,
    ):
        self.suppression_window = suppression_window
        self.retention_window = retention_window
        self._seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def should_process(self, fingerprint: str, now: Optional[float] = None) -> bool:
        """
        Atomic check-and-set.
        Returns False for a repeat inside the suppression window (timestamp untouched),
        otherwise records `now` and returns True.
        """
        if now is None:
            now = time.monotonic()
        with self._lock:
            last = self._seen.get(fingerprint)
            if last is not None and now - last < self.suppression_window:
                logger.debug(f"Skipping duplicate message (processed {now - last:.1f}s ago)")
                return False
            self._seen[fingerprint] = now
            return True

    def purge_expired(self, now: Optional[float] = None) -> int:
        """Drop entries older than the retention window. Returns how many were removed."""
        if now is None:
            now = time.monotonic()
        with self._lock:
            expired = [k for k, seen in self._seen.items() if now - seen > self.retention_window]
            for key in expired:
                del self._seen[key]
        if expired:
            logger.debug(f"Purged {len(expired)} dedup entries")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __contains__(self, fingerprint: str) -> bool:
        with self._lock:
            return fingerprint in self._seen

class DedupSweeper:
    """Background thread that calls purge_expired on a fixed interval."""

    def __init__(self, guard: DedupGuard, interval: float = SWEEP_INTERVAL):
        self.guard = guard
        self.interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="dedup-sweeper", daemon=True)

    def start(self):
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _run(self):
        while not self._stop.wait(self.interval):
            try:
                self.guard.purge_expired()
            except Exception:
                logger.exception("Dedup sweep failed")
