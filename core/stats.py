import threading


class IssueStats:
    """Counters for identifiers minted and decoded by the service."""

    def __init__(self):
        self._lock = threading.Lock()
        self.minted = 0
        self.decoded = 0
        self.rejected = 0

    def record_minted(self, count=1):
        with self._lock:
            self.minted += count

    def record_decoded(self):
        with self._lock:
            self.decoded += 1

    def record_rejected(self):
        with self._lock:
            self.rejected += 1

    def get_stats(self):
        with self._lock:
            return {
                "minted": self.minted,
                "decoded": self.decoded,
                "rejected": self.rejected,
            }
