"""
=============================================================================
SERVER STATISTICS
=============================================================================

Running request counters, shared by every connection thread and read once
at shutdown.

=============================================================================
WHY A LOCK?
=============================================================================

`self.total += 1` is not atomic in Python. It is a read, an add and a
write, and a thread switch can land between them:

    Thread A: read total (5)
    Thread B: read total (5)
    Thread A: write 6
    Thread B: write 6          ◄── one request lost

Every mutation and the snapshot read happen under one threading.Lock.

=============================================================================
WHAT GETS COUNTED
=============================================================================

    ┌────────────────────────────────┬────────┬─────────┬────────┐
    │ Outcome                        │ total  │ success │ error  │
    ├────────────────────────────────┼────────┼─────────┼────────┤
    │ Parse failure (400)            │   -    │    -    │   +1   │
    │ 200 sent                       │   +1   │   +1    │   -    │
    │ 404 / 405 / 500 sent           │   +1   │    -    │   +1   │
    │ Parsed, but send failed        │   +1   │    -    │   +1   │
    └────────────────────────────────┴────────┴─────────┴────────┘

Parse failures never reach `total`: a request only counts once it was
well-formed enough to route. So once in-flight requests settle,
total == successful + error - parse_failures.

=============================================================================
"""

import threading
import time
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class StatsSnapshot:
    """Consistent, immutable copy of the counters at one instant."""

    total_requests: int
    successful_requests: int
    error_requests: int
    start_time: float
    taken_at: float

    @property
    def uptime(self) -> float:
        """Seconds between server start and the snapshot."""
        return self.taken_at - self.start_time

    @property
    def success_rate(self) -> float:
        """Successful requests as a percentage of total, 0.0 when idle."""
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests * 100

    def format_report(self) -> str:
        """
        Human readable report, printed at shutdown:

            === Server Statistics ===
            Uptime: 0:05:12
            Total requests: 42
            ...
        """
        return "\n".join([
            "=== Server Statistics ===",
            f"Uptime: {timedelta(seconds=round(self.uptime))}",
            f"Total requests: {self.total_requests}",
            f"Successful requests: {self.successful_requests}",
            f"Error requests: {self.error_requests}",
            f"Success rate: {self.success_rate:.1f}%",
            "========================",
        ])


class ServerStats:
    """
    Thread-safe request counters.

    Usage:
        stats = ServerStats()
        stats.record_request()
        stats.record_success()
        print(stats.snapshot().format_report())
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._total = 0
        self._successful = 0
        self._errors = 0
        self.start_time = time.time()

    def record_request(self):
        """Count a request that parsed successfully."""
        with self._lock:
            self._total += 1

    def record_success(self):
        """Count a 200 response that was sent."""
        with self._lock:
            self._successful += 1

    def record_error(self):
        """Count a parse failure, an error response, or a failed send."""
        with self._lock:
            self._errors += 1

    def snapshot(self) -> StatsSnapshot:
        """Read all counters at once."""
        with self._lock:
            return StatsSnapshot(
                total_requests=self._total,
                successful_requests=self._successful,
                error_requests=self._errors,
                start_time=self.start_time,
                taken_at=time.time(),
            )
