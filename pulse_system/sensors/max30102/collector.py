"""
MAX30102 Data Collector
Polling loop: pulls sample batches from a source, feeds the processor, reports metrics
"""

import logging
import time
import threading
from typing import Dict, List, Optional, Sequence

from .config import MAX30102Config
from .processor import MAX30102Processor, Sample, VitalsReading

logger = logging.getLogger(__name__)


class MAX30102Collector:
    """
    MAX30102 collector - owns the polling loop around the processor

    Each polling cycle drains up to fifo_batch_size samples from the source
    and processes them in order. Every display_interval_ms of logical time
    the current metrics are forwarded to the sinks and the heart rate
    staleness reset is applied. The core never pushes to the sinks itself.
    """

    def __init__(
        self,
        source,
        *,
        processor: Optional[MAX30102Processor] = None,
        sinks: Optional[Sequence] = None,
        config: Optional[MAX30102Config] = None
    ):
        """
        Initialise the MAX30102 collector.

        Args:
            source:    Sample source implementing read_batch(buffer) -> int.
            processor: MAX30102Processor to feed. Created from config if omitted.
            sinks:     Reporting sinks implementing report(metrics, reading).
            config:    MAX30102Config instance. Defaults to the processor's config,
                       or MAX30102Config.for_monitoring().

        Returns:
            None.
        """
        if config is None:
            config = processor.config if processor else MAX30102Config.for_monitoring()

        self.config = config
        self.source = source
        self.processor = processor if processor else MAX30102Processor(config)
        self.sinks: List = list(sinks) if sinks else []

        # State management
        self.is_running = False
        self.collection_thread = None
        self.stop_event = threading.Event()

        self.buffer: List[Sample] = [Sample(0, 0)] * self.config.fifo_batch_size

        # Reporting state
        self.last_report_ms = 0
        self.latest_temperature: Optional[float] = None
        self.poll_count = 0
        self.temp_counter = 0
        self.report_count = 0

        logger.info(
            f"MAX30102 Collector initialized "
            f"(mode: {self.config.mode}, batch: {self.config.fifo_batch_size}, "
            f"report every {self.config.display_interval_ms} ms)"
        )

    def start(self):
        """
        Start the collection thread.

        Returns:
            None.
        """
        if self.is_running:
            logger.warning("MAX30102 collector already running")
            return

        self.is_running = True
        self.stop_event.clear()

        self.collection_thread = threading.Thread(
            target=self._collection_loop,
            name="MAX30102-Collection-Thread",
            daemon=True
        )
        self.collection_thread.start()

        logger.info("✓ MAX30102 data collection started successfully")

    def stop(self):
        """
        Signal the collection thread to stop and wait for it.

        Estimator state is left as is; nothing needs flushing.

        Returns:
            None.
        """
        if not self.is_running:
            logger.warning("MAX30102 collector not running")
            return

        logger.info("Stopping MAX30102 data collection...")

        self.stop_event.set()

        if self.collection_thread and self.collection_thread.is_alive():
            self.collection_thread.join(timeout=5)

        self.is_running = False
        logger.info(
            f"✓ MAX30102 data collection stopped "
            f"({self.processor.samples_processed} samples processed)"
        )

    def _collection_loop(self):
        """
        Main collection loop, runs in a background thread.

        Returns:
            None.
        """
        logger.info("MAX30102 collection loop started")

        while not self.stop_event.is_set():
            try:
                self.poll_once()
                if self.config.poll_interval > 0:
                    time.sleep(self.config.poll_interval)

            except Exception as e:
                logger.error(f"Error in collection loop: {e}", exc_info=True)
                time.sleep(0.1)

        logger.info("MAX30102 collection loop stopped")

    def poll_once(self) -> int:
        """
        Run a single polling cycle.

        Reads one batch from the source, processes every sample, reports
        when the display interval has elapsed and reads the temperature
        every temperature_interval_polls cycles.

        Returns:
            Number of samples processed this cycle.
        """
        count = self.source.read_batch(self.buffer)
        if count > 0:
            self.processor.process_batch(self.buffer[:count])

        self.poll_count += 1

        now_ms = self.processor.clock.now_ms()
        if max(now_ms - self.last_report_ms, 0) >= self.config.display_interval_ms:
            self.last_report_ms = now_ms
            self._report(self._collect_metrics(), self.processor.get_reading())
            self.processor.reset_if_no_signal()

        self.temp_counter += 1
        if self.temp_counter >= self.config.temperature_interval_polls:
            self.temp_counter = 0
            self._read_temperature()

        return count

    def run_until_exhausted(self, max_idle_polls: int = 1) -> int:
        """
        Poll a finite source until it stops delivering samples.

        Args:
            max_idle_polls: Consecutive empty polls that end the run.

        Returns:
            Total number of samples processed.
        """
        total = 0
        idle = 0

        while idle < max_idle_polls:
            count = self.poll_once()
            total += count
            idle = idle + 1 if count == 0 else 0

        logger.info(f"✓ Source exhausted after {total} samples")
        return total

    def _collect_metrics(self) -> Dict[str, float]:
        reading = self.processor.get_reading()
        metrics = {
            'heart_rate_bpm': reading.bpm,
            'spo2_percent': reading.spo2,
            'signal_range': reading.signal_range,
        }
        if self.latest_temperature is not None:
            metrics['temperature_c'] = self.latest_temperature
        return metrics

    def _read_temperature(self):
        if not hasattr(self.source, 'read_temperature'):
            return

        try:
            temperature = self.source.read_temperature()
        except Exception as e:
            logger.error(f"Error reading temperature: {e}")
            return

        if temperature is not None:
            self.latest_temperature = float(temperature)
            self._report({'temperature_c': self.latest_temperature}, self.processor.get_reading())

    def _report(self, metrics: Dict[str, float], reading: VitalsReading):
        self.report_count += 1

        for sink in self.sinks:
            try:
                sink.report(metrics, reading)
            except Exception as e:
                logger.error(f"Sink {sink!r} failed: {e}", exc_info=True)

    def get_status(self) -> dict:
        """
        Return the current collector state.

        Returns:
            Dict containing sensor type, mode, running state,
            sample count and the latest metrics.
        """
        reading = self.processor.get_reading()
        return {
            'sensor_type': 'MAX30102',
            'mode': self.config.mode,
            'is_running': self.is_running,
            'polls': self.poll_count,
            'samples_processed': reading.samples_processed,
            'time_ms': reading.time_ms,
            'heart_rate_bpm': reading.bpm,
            'spo2_percent': reading.spo2,
            'temperature_c': self.latest_temperature,
            'reports_sent': self.report_count,
        }

    def __repr__(self):
        """String representation showing running state."""
        status = "running" if self.is_running else "stopped"
        return f"<MAX30102Collector(status={status})>"
