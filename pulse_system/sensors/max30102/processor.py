"""
MAX30102 Signal Processor
Runs red/IR sample pairs through the HR and SpO2 estimators on a shared logical clock
"""

import logging
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional, Tuple

import numpy as np

from pulse_system.coordinator.clock import LogicalClock

from .config import MAX30102Config
from .heart_rate import HeartRateEstimator
from .spo2 import SaturationEstimator

logger = logging.getLogger(__name__)


class Sample(NamedTuple):
    """One acquisition tick from the photodiode front end."""
    red: int
    ir: int


@dataclass
class VitalsReading:
    """
    Snapshot of the estimator outputs after the most recent sample.

    bpm and spo2 are 0 while undetermined.
    """
    time_ms: int = 0
    bpm: int = 0
    spo2: int = 0
    signal_range: int = 0
    spo2_reliable: bool = False
    samples_processed: int = 0

    def status_message(self, weak_signal_range: int = 500) -> str:
        """
        Human readable heart rate status for display.

        Args:
            weak_signal_range: Below this signal range the finger is assumed misplaced

        Returns:
            Heart rate text, or a hint about finger placement / detection progress.
        """
        if self.bpm > 0:
            return f"Heart Rate: {self.bpm} BPM"
        if self.signal_range < weak_signal_range:
            return "Place finger firmly on sensor"
        return "Detecting heartbeat..."


class MAX30102Processor:
    """
    Signal processing for MAX30102 data

    Every sample is pushed through the heart rate estimator and then the
    SpO2 estimator, after which the logical clock advances by one sample
    period. Processing is strictly sequential, so the same input sequence
    always yields the same readings.

    Two entry points:
    - Real-time: process_batch() on each FIFO batch delivered by the collector
    - Offline: process_recording() on whole numpy recordings
    """

    def __init__(self, config: Optional[MAX30102Config] = None):
        """
        Initialize MAX30102 processor

        Args:
            config: MAX30102 configuration
        """
        self.config = config if config else MAX30102Config()

        self.clock = LogicalClock(self.config.sample_period_ms)
        self.heart_rate = HeartRateEstimator(self.config)
        self.saturation = SaturationEstimator(self.config)

        self.samples_processed = 0
        self.spo2_reliable = False

        logger.info("MAX30102 Processor initialized")

    def process_sample(self, red: int, ir: int) -> VitalsReading:
        """
        Process a single red/IR pair and advance the logical clock

        Args:
            red: Red signal value
            ir: Infrared signal value

        Returns:
            VitalsReading after this sample
        """
        red = int(red)
        ir = int(ir)

        self.heart_rate.process_sample(ir, self.clock.now_ms())
        self.saturation.process_sample(red, ir)
        self.spo2_reliable = self.saturation.signal_quality(red, ir)

        self.samples_processed += 1
        self.clock.advance()

        return self.get_reading()

    def process_batch(self, samples: Iterable[Tuple[int, int]]) -> VitalsReading:
        """
        Process an ordered batch of (red, ir) pairs

        Args:
            samples: Sample pairs in acquisition order

        Returns:
            VitalsReading after the last sample (unchanged for an empty batch)
        """
        for red, ir in samples:
            self.process_sample(red, ir)

        return self.get_reading()

    def process_recording(self, red: np.ndarray, ir: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Offline processing of a whole recording

        Args:
            red: Red signal samples
            ir: Infrared signal samples, same length as red

        Returns:
            Tuple of (bpm, spo2) arrays holding the estimator output after each sample
        """
        red = np.asarray(red, dtype=np.int64)
        ir = np.asarray(ir, dtype=np.int64)

        if red.shape != ir.shape or red.ndim != 1:
            raise ValueError(f"red and ir must be 1-D arrays of equal length, got {red.shape} and {ir.shape}")

        logger.info(f"Processing recording of {len(ir)} samples")

        bpm = np.zeros(len(ir), dtype=np.int64)
        spo2 = np.zeros(len(ir), dtype=np.int64)

        for i, (red_value, ir_value) in enumerate(zip(red.tolist(), ir.tolist())):
            reading = self.process_sample(red_value, ir_value)
            bpm[i] = reading.bpm
            spo2[i] = reading.spo2

        return bpm, spo2

    def get_reading(self) -> VitalsReading:
        """
        Current estimator outputs

        Returns:
            VitalsReading snapshot
        """
        return VitalsReading(
            time_ms=self.clock.now_ms(),
            bpm=self.heart_rate.bpm,
            spo2=self.saturation.spo2,
            signal_range=self.heart_rate.signal_range(),
            spo2_reliable=self.spo2_reliable,
            samples_processed=self.samples_processed,
        )

    def reset_if_no_signal(self):
        """Forward the staleness reset to the heart rate estimator."""
        self.heart_rate.reset_if_no_signal()

    def reset(self):
        """
        Discard all estimator state and restart the logical clock.

        Should be called when starting a new measurement to avoid
        stale data affecting calculations.

        Returns:
            None.
        """
        self.clock.reset()
        self.heart_rate = HeartRateEstimator(self.config)
        self.saturation = SaturationEstimator(self.config)
        self.samples_processed = 0
        self.spo2_reliable = False
