"""
SpO2 Estimator
Ratio-of-ratios blood oxygen saturation from windowed AC/DC energy sums
"""

import logging
from typing import Optional

from .config import MAX30102Config
from .filters import BaselineRemover, fixed_div

logger = logging.getLogger(__name__)


class SaturationEstimator:
    """
    Estimates SpO2 from the pulsatile (AC) and baseline (DC) parts of the
    red and IR signals.

    AC energy is the sum of absolute DC-removed values, DC energy the sum of
    raw values. Every spo2_window_size samples the window is turned into a
    ratio-of-ratios R, mapped through the linear calibration
    SpO2 = 104 - 17 * R, clamped and blended into the running value.
    """

    def __init__(self, config: Optional[MAX30102Config] = None):
        """
        Initialize SpO2 estimator

        Args:
            config: MAX30102 configuration
        """
        self.config = config if config else MAX30102Config()

        self.red_filter = BaselineRemover(self.config.spo2_filter_alpha)
        self.ir_filter = BaselineRemover(self.config.spo2_filter_alpha)

        self.red_ac_sum = 0
        self.red_dc_sum = 0
        self.ir_ac_sum = 0
        self.ir_dc_sum = 0
        self.sample_count = 0
        self.spo2 = 0

    def process_sample(self, red: int, ir: int) -> int:
        """
        Feed one red/IR sample pair.

        Args:
            red: Raw red (reflectance) magnitude
            ir: Raw infrared magnitude

        Returns:
            Current smoothed SpO2 percentage, 0 while undetermined
        """
        threshold = self.config.finger_threshold
        if red < threshold or ir < threshold:
            return self.spo2

        self.red_ac_sum += abs(self.red_filter.step(red))
        self.ir_ac_sum += abs(self.ir_filter.step(ir))
        self.red_dc_sum += red
        self.ir_dc_sum += ir
        self.sample_count += 1

        if self.sample_count >= self.config.spo2_window_size:
            self._close_window()

        return self.spo2

    def _close_window(self):
        cfg = self.config
        count = self.sample_count

        red_ac_avg = self.red_ac_sum // count
        red_dc_avg = self.red_dc_sum // count
        ir_ac_avg = self.ir_ac_sum // count
        ir_dc_avg = self.ir_dc_sum // count

        if red_dc_avg > 0 and ir_dc_avg > 0 and ir_ac_avg > 0:
            red_ratio = red_ac_avg * cfg.spo2_ratio_scale // red_dc_avg
            ir_ratio = ir_ac_avg * cfg.spo2_ratio_scale // ir_dc_avg

            if ir_ratio > 0:
                ratio = red_ratio * cfg.spo2_ratio_scale // ir_ratio
                measured = self.spo2_from_ratio(ratio)

                if self.spo2 == 0:
                    self.spo2 = measured
                else:
                    self.spo2 = (
                        self.spo2 * cfg.spo2_history_weight + measured * cfg.spo2_new_weight
                    ) // (cfg.spo2_history_weight + cfg.spo2_new_weight)
                logger.debug(f"SpO2 window: R={ratio}, measured {measured}% -> {self.spo2}%")
            else:
                logger.debug("SpO2 window skipped: IR AC/DC ratio rounds to zero")
        else:
            logger.debug("SpO2 window skipped: degenerate AC/DC averages")

        self.red_ac_sum = 0
        self.red_dc_sum = 0
        self.ir_ac_sum = 0
        self.ir_dc_sum = 0
        self.sample_count = 0

    def spo2_from_ratio(self, ratio: int) -> int:
        """
        Map a ratio-of-ratios (scaled by spo2_ratio_scale) to a clamped SpO2.

        Args:
            ratio: R * spo2_ratio_scale

        Returns:
            SpO2 percentage within [spo2_min, spo2_max]
        """
        cfg = self.config
        raw = fixed_div(cfg.spo2_intercept - cfg.spo2_slope * ratio, cfg.spo2_ratio_scale)
        return min(max(raw, cfg.spo2_min), cfg.spo2_max)

    def signal_quality(self, red: int, ir: int) -> bool:
        """
        Check whether a raw sample pair is strong enough to trust the SpO2 value.

        Args:
            red: Raw red magnitude
            ir: Raw infrared magnitude

        Returns:
            True if both channels exceed spo2_quality_threshold
        """
        threshold = self.config.spo2_quality_threshold
        return red > threshold and ir > threshold

    def __repr__(self):
        return f"<SaturationEstimator(spo2={self.spo2}, window={self.sample_count}/{self.config.spo2_window_size})>"
