"""
MAX30102 Sensor Configuration
Heart rate and SpO2 estimation parameters
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass
class MAX30102Config:
    """
    Configuration parameters for the MAX30102 heart rate and pulse oximeter pipeline.

    Holds the polling settings of the collector loop, the detection thresholds
    of the heart rate estimator and the calibration constants of the SpO2
    estimator. The SpO2 calibration values are fitted, not physically derived,
    and should only be changed with new calibration data.
    """

    # Operating mode
    mode: str = 'monitor'  # 'monitor' or 'replay'

    # Sampling settings
    sample_period_ms: int = 10  # Logical time advanced per sample (100 Hz)
    fifo_batch_size: int = 16  # Samples pulled per polling cycle
    poll_interval: float = 0.02  # Seconds slept between polling cycles

    # Reporting settings
    display_interval_ms: int = 2000  # Logical ms between metric reports
    temperature_interval_polls: int = 250  # Polling cycles between temperature reads
    temperature_settle_delay: float = 0.03  # Seconds to wait for a temperature conversion
    weak_signal_range: int = 500  # Below this range the finger is assumed misplaced

    # Finger-present gate (both estimators)
    finger_threshold: int = 1000

    # Heart rate estimator
    hr_filter_alpha: Tuple[int, int] = (31, 32)
    hr_buffer_size: int = 8
    hr_warmup_samples: int = 100
    hr_range_reset_interval: int = 500
    hr_min_range: int = 1000
    hr_threshold_divisor: int = 5
    hr_margin_divisor: int = 10
    hr_min_interval_ms: int = 400
    hr_max_interval_ms: int = 1500
    hr_min_bpm: int = 40
    hr_max_bpm: int = 180
    hr_history_weight: int = 2
    hr_instant_weight: int = 3
    hr_stale_reset_interval: int = 1000

    # SpO2 estimator (calibration constants, not physically derived)
    spo2_filter_alpha: Tuple[int, int] = (15, 16)
    spo2_window_size: int = 100
    spo2_ratio_scale: int = 1000
    spo2_intercept: int = 104000  # 104 * scale
    spo2_slope: int = 17
    spo2_min: int = 70
    spo2_max: int = 100
    spo2_history_weight: int = 3
    spo2_new_weight: int = 1
    spo2_quality_threshold: int = 5000

    def __post_init__(self):
        for name in ('hr_filter_alpha', 'spo2_filter_alpha'):
            num, den = getattr(self, name)
            if den <= 0 or num < 0 or num >= den:
                raise ValueError(f"{name} must satisfy 0 <= num < den, got {num}/{den}")

        if self.hr_buffer_size < 3:
            raise ValueError("hr_buffer_size must hold a centre sample and two neighbours")
        if self.spo2_window_size <= 0:
            raise ValueError("spo2_window_size must be positive")
        if self.sample_period_ms <= 0:
            raise ValueError("sample_period_ms must be positive")
        if self.fifo_batch_size <= 0:
            raise ValueError("fifo_batch_size must be positive")
        if not 0 < self.hr_min_interval_ms <= self.hr_max_interval_ms:
            raise ValueError("hr interval bounds must satisfy 0 < min <= max")
        if not 0 < self.hr_min_bpm <= self.hr_max_bpm:
            raise ValueError("hr bpm bounds must satisfy 0 < min <= max")
        if not 0 < self.spo2_min <= self.spo2_max:
            raise ValueError("spo2 bounds must satisfy 0 < min <= max")
        if self.hr_history_weight + self.hr_instant_weight <= 0:
            raise ValueError("hr smoothing weights must not sum to zero")
        if self.spo2_history_weight + self.spo2_new_weight <= 0:
            raise ValueError("spo2 smoothing weights must not sum to zero")

    @classmethod
    def for_monitoring(cls) -> 'MAX30102Config':
        """
        Create a configuration for live monitoring.

        The collector sleeps poll_interval between FIFO reads so the sensor
        has time to fill its buffer.

        Returns:
            MAX30102Config with mode='monitor'.
        """
        config = cls(
            mode='monitor',
        )
        return config

    @classmethod
    def for_replay(cls) -> 'MAX30102Config':
        """
        Create a configuration for replaying a recorded session.

        Disables sleeping between polling cycles and temperature reads,
        recordings are processed as fast as they can be read.

        Returns:
            MAX30102Config with mode='replay' and poll_interval=0.
        """
        config = cls(
            mode='replay',
            poll_interval=0.0,
            temperature_settle_delay=0.0,
        )
        return config
