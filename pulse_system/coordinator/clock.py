"""
Logical Clock
Sample-driven millisecond time base for the vitals pipeline
"""

import threading
import logging

logger = logging.getLogger(__name__)


class LogicalClock:
    """
    Thread-safe logical clock advanced once per processed sample

    Time is not read from the system clock: every processed sample moves the
    clock forward by a fixed quantum, so replaying the same samples always
    produces the same timestamps.
    - Monotonic (never moves backwards)
    - Fixed quantum per tick (10 ms at the 100 Hz sensor rate)
    """

    def __init__(self, quantum_ms: int = 10):
        """
        Initialize logical clock

        Args:
            quantum_ms: Milliseconds added per advance()
        """
        if quantum_ms <= 0:
            raise ValueError(f"quantum_ms must be positive, got {quantum_ms}")

        self._lock = threading.Lock()
        self.quantum_ms = quantum_ms
        self._time_ms = 0
        self._ticks = 0

        logger.debug(f"Logical clock initialized ({quantum_ms} ms per sample)")

    def now_ms(self) -> int:
        """
        Get current logical time

        Returns:
            int: Milliseconds elapsed since the first sample
        """
        with self._lock:
            return self._time_ms

    def advance(self, ticks: int = 1) -> int:
        """
        Move the clock forward by whole quanta

        Args:
            ticks: Number of samples processed

        Returns:
            int: New logical time in milliseconds
        """
        if ticks < 0:
            raise ValueError("Logical clock cannot move backwards")

        with self._lock:
            self._time_ms += ticks * self.quantum_ms
            self._ticks += ticks
            return self._time_ms

    def reset(self):
        """Reset clock state (used when a session restarts)"""
        with self._lock:
            self._time_ms = 0
            self._ticks = 0
            logger.info("Logical clock reset")

    def get_stats(self) -> dict:
        """
        Get clock statistics

        Returns:
            dict: Clock usage statistics
        """
        with self._lock:
            return {
                'total_ticks': self._ticks,
                'time_ms': self._time_ms,
                'quantum_ms': self.quantum_ms,
            }

    def __repr__(self):
        return f"<LogicalClock(time_ms={self._time_ms})>"
