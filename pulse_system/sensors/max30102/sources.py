"""
MAX30102 Sample Sources
Deliver ordered batches of red/IR pairs to the collector

A source implements read_batch(buffer) -> int: fill up to len(buffer) slots
with pending samples and return how many were written. Zero is a valid
result meaning nothing is pending. Sources may also implement
read_temperature() -> Optional[float].
"""

import logging
import time
from typing import List, Optional

import numpy as np
import pandas as pd

from .processor import Sample

logger = logging.getLogger(__name__)


class ReplaySampleSource:
    """
    Replays a recorded session from red/IR arrays

    Each read_batch() call hands out the next slice of the recording, so
    the collector sees the same batching it would see from a live FIFO.
    """

    def __init__(self, red, ir, temperatures: Optional[List[float]] = None):
        """
        Args:
            red: Red signal samples
            ir: Infrared signal samples, same length as red
            temperatures: Optional temperature readings returned in order by read_temperature()
        """
        self.red = np.asarray(red, dtype=np.int64)
        self.ir = np.asarray(ir, dtype=np.int64)

        if self.red.shape != self.ir.shape or self.red.ndim != 1:
            raise ValueError(f"red and ir must be 1-D arrays of equal length, got {self.red.shape} and {self.ir.shape}")

        self.position = 0
        self.temperatures = list(temperatures) if temperatures else []

        logger.info(f"Replay source ready: {len(self.ir)} samples")

    @classmethod
    def from_csv(cls, path: str) -> 'ReplaySampleSource':
        """
        Load a recording from a CSV file with 'red' and 'ir' columns

        Args:
            path: CSV file path

        Returns:
            ReplaySampleSource over the recording
        """
        df = pd.read_csv(path)

        missing = {'red', 'ir'} - set(df.columns)
        if missing:
            raise ValueError(f"Recording {path} is missing columns: {sorted(missing)}")

        df = df.dropna(subset=['red', 'ir'])
        return cls(df['red'].to_numpy(), df['ir'].to_numpy())

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.ir)

    def read_batch(self, buffer: list) -> int:
        count = min(len(buffer), len(self.ir) - self.position)

        for i in range(count):
            j = self.position + i
            buffer[i] = Sample(int(self.red[j]), int(self.ir[j]))

        self.position += count
        return count

    def read_temperature(self) -> Optional[float]:
        if not self.temperatures:
            return None
        return self.temperatures.pop(0)

    def __len__(self):
        return len(self.ir)


class DriverSampleSource:
    """
    Adapter over a MAX30102 driver object

    The driver must provide read_fifo() -> (red, ir). If it also provides
    get_data_present() the adapter drains that many samples per batch,
    otherwise one sample is read per call. Temperature is read through
    start_temperature_measurement() / read_temperature() when available.
    """

    def __init__(self, driver, settle_delay: float = 0.03):
        """
        Args:
            driver: Sensor driver instance (I2C access is the driver's job)
            settle_delay: Seconds to wait between starting and reading a temperature conversion
        """
        self.driver = driver
        self.settle_delay = settle_delay

    def read_batch(self, buffer: list) -> int:
        if hasattr(self.driver, 'get_data_present'):
            available = min(self.driver.get_data_present(), len(buffer))
        else:
            available = min(1, len(buffer))

        count = 0
        for _ in range(available):
            red, ir = self.driver.read_fifo()
            # Drivers report an empty FIFO read as zeros
            if red and ir:
                buffer[count] = Sample(int(red), int(ir))
                count += 1

        return count

    def read_temperature(self) -> Optional[float]:
        if not hasattr(self.driver, 'read_temperature'):
            return None

        if hasattr(self.driver, 'start_temperature_measurement'):
            self.driver.start_temperature_measurement()
            if self.settle_delay > 0:
                time.sleep(self.settle_delay)

        return self.driver.read_temperature()
