"""
Heart Rate Estimator
Peak detection on the DC-removed IR signal with an adaptive threshold
"""

import logging
from typing import Optional

from .config import MAX30102Config
from .filters import BaselineRemover

logger = logging.getLogger(__name__)


class HeartRateEstimator:
    """
    Converts a stream of IR magnitudes into a smoothed BPM value.

    State is a fixed ring of the most recent filtered samples, a running
    min/max over a rolling horizon, the time of the last accepted peak and
    the current BPM (0 = undetermined). A peak is the newest sample when it
    clears the adaptive threshold and both of its circular neighbours by a
    margin; peak-to-peak intervals are turned into BPM and blended into the
    running value.
    """

    def __init__(self, config: Optional[MAX30102Config] = None):
        """
        Initialize heart rate estimator

        Args:
            config: MAX30102 configuration
        """
        self.config = config if config else MAX30102Config()

        self.dc_filter = BaselineRemover(self.config.hr_filter_alpha)

        # Fixed ring of filtered samples, never resized
        self.samples = [0] * self.config.hr_buffer_size
        self.index = 0

        self.min_ir: Optional[int] = None
        self.max_ir: Optional[int] = None
        self._sample_count = 0
        self._last_peak_time: Optional[int] = None
        self._bpm = 0

    @property
    def bpm(self) -> int:
        """Current smoothed BPM, 0 while undetermined"""
        return self._bpm

    @property
    def sample_count(self) -> int:
        """Samples that passed the finger-present gate"""
        return self._sample_count

    @property
    def last_peak_time(self) -> Optional[int]:
        """Logical time of the last accepted peak, None before the first"""
        return self._last_peak_time

    def process_sample(self, ir_value: int, now_ms: int) -> int:
        """
        Feed one IR sample taken at logical time now_ms.

        Args:
            ir_value: Raw infrared magnitude
            now_ms: Logical timestamp of the sample in milliseconds

        Returns:
            Current smoothed BPM, 0 while undetermined
        """
        cfg = self.config

        # No finger on the sensor
        if ir_value < cfg.finger_threshold:
            return self._bpm

        self._sample_count += 1

        filtered = self.dc_filter.step(ir_value)
        if filtered < 0:
            filtered = 0

        if self._sample_count > cfg.hr_warmup_samples:
            self._track_range(filtered)

        size = len(self.samples)
        self.samples[self.index] = filtered
        centre = self.index
        self.index = (self.index + 1) % size

        if self._sample_count < size:
            return self._bpm

        # Range only exists once warm-up is over
        if self.min_ir is None:
            return self._bpm

        signal_range = max(self.max_ir - self.min_ir, cfg.hr_min_range)
        threshold = self.min_ir + signal_range // cfg.hr_threshold_divisor
        margin = signal_range // cfg.hr_margin_divisor

        current = self.samples[centre]
        prev = self.samples[(centre + size - 1) % size]
        nxt = self.samples[(centre + 1) % size]

        # Strict: a bump of exactly the margin is still noise
        if current > threshold and current > prev + margin and current > nxt + margin:
            self._accept_peak(now_ms)

        return self._bpm

    def _track_range(self, filtered: int):
        if self.min_ir is None:
            self.min_ir = filtered
            self.max_ir = filtered
        else:
            self.min_ir = min(self.min_ir, filtered)
            self.max_ir = max(self.max_ir, filtered)

        # Re-baseline against slow amplitude drift
        if self._sample_count % self.config.hr_range_reset_interval == 0:
            self.min_ir = filtered
            self.max_ir = filtered

    def _accept_peak(self, now_ms: int):
        cfg = self.config

        if self._last_peak_time is not None:
            time_diff = max(now_ms - self._last_peak_time, 0)

            if cfg.hr_min_interval_ms <= time_diff <= cfg.hr_max_interval_ms:
                instant_bpm = 60000 // time_diff

                if cfg.hr_min_bpm <= instant_bpm <= cfg.hr_max_bpm:
                    if self._bpm == 0:
                        self._bpm = instant_bpm
                    else:
                        self._bpm = (
                            self._bpm * cfg.hr_history_weight + instant_bpm * cfg.hr_instant_weight
                        ) // (cfg.hr_history_weight + cfg.hr_instant_weight)
                    logger.debug(f"Peak at {now_ms} ms: interval {time_diff} ms, {instant_bpm} BPM -> {self._bpm}")
            else:
                logger.debug(f"Peak at {now_ms} ms rejected: interval {time_diff} ms out of range")

        self._last_peak_time = now_ms

    def signal_range(self) -> int:
        """
        Peak-to-peak range of the filtered signal, for signal quality display.

        Returns:
            max_ir - min_ir, or 0 before a range has been established
        """
        if self.min_ir is None or self.max_ir <= self.min_ir:
            return 0
        return self.max_ir - self.min_ir

    def reset_if_no_signal(self):
        """
        Forced staleness reset, called by the owner on its own cadence.

        Zeroes BPM when the sample counter sits on a multiple of
        hr_stale_reset_interval.
        """
        if self._sample_count > 0 and self._sample_count % self.config.hr_stale_reset_interval == 0:
            if self._bpm:
                logger.info(f"Heart rate reset after {self._sample_count} samples")
            self._bpm = 0

    def __repr__(self):
        return f"<HeartRateEstimator(bpm={self._bpm}, samples={self._sample_count})>"
