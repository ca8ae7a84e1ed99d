"""
Reporting sinks
Receive periodic metric updates from the collector

A sink implements report(metrics, reading) where metrics maps metric names
('heart_rate_bpm', 'spo2_percent', 'signal_range', 'temperature_c') to
scalar values and reading is the VitalsReading they were taken from.
"""

import logging
from typing import Dict, List, Optional

from .processor import VitalsReading

logger = logging.getLogger(__name__)


class LoggingSink:
    """Display sink: writes each update as a log line"""

    def __init__(self, log: Optional[logging.Logger] = None, weak_signal_range: int = 500):
        self.log = log if log else logger
        self.weak_signal_range = weak_signal_range

    def report(self, metrics: Dict[str, float], reading: VitalsReading):
        if 'heart_rate_bpm' in metrics:
            self.log.info(f"💓 {reading.status_message(self.weak_signal_range)}")

            spo2 = metrics.get('spo2_percent', 0)
            if spo2:
                quality = "reliable" if reading.spo2_reliable else "acquiring"
                self.log.info(f"🩸 SpO2: {spo2}% ({quality})")

        if 'temperature_c' in metrics:
            self.log.info(f"🌡️  Temperature: {metrics['temperature_c']:.2f}°C")


class MemorySink:
    """Keeps every update in memory, for replays and tests"""

    def __init__(self):
        self.updates: List[Dict[str, float]] = []
        self.readings: List[VitalsReading] = []

    def report(self, metrics: Dict[str, float], reading: VitalsReading):
        self.updates.append(dict(metrics))
        self.readings.append(reading)

    def values(self, metric_type: str) -> List[float]:
        return [u[metric_type] for u in self.updates if metric_type in u]
