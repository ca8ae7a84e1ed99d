"""Tests for the collector loop, sample sources and sensor coordinator"""

import logging
import time

import numpy as np
import pandas as pd
import pytest

from pulse_system.coordinator import SensorCoordinator
from pulse_system.sensors.max30102 import (
    DriverSampleSource,
    LoggingSink,
    MAX30102Collector,
    MAX30102Config,
    MAX30102Processor,
    MemorySink,
    ReplaySampleSource,
    Sample,
    VitalsReading,
)

from tests.helpers import BASELINE, periodic_counters, pulse_train


def recording(n=3000):
    return np.full(n, BASELINE), np.array(pulse_train(n, periodic_counters(n)))


class FakeDriver:
    """Driver double exposing the MAX30102 FIFO interface"""

    def __init__(self, samples, temperature=None):
        self.samples = list(samples)
        self.temperature = temperature
        self.conversions = 0

    def get_data_present(self):
        return len(self.samples)

    def read_fifo(self):
        return self.samples.pop(0)

    def start_temperature_measurement(self):
        self.conversions += 1

    def read_temperature(self):
        return self.temperature


class BrokenSink:
    def report(self, metrics, reading):
        raise RuntimeError("display unplugged")


def test_replay_source_hands_out_batches():
    source = ReplaySampleSource([1, 2, 3, 4, 5], [10, 20, 30, 40, 50])
    buffer = [Sample(0, 0)] * 3

    assert source.read_batch(buffer) == 3
    assert buffer == [Sample(1, 10), Sample(2, 20), Sample(3, 30)]
    assert source.read_batch(buffer) == 2
    assert buffer[:2] == [Sample(4, 40), Sample(5, 50)]
    assert source.read_batch(buffer) == 0
    assert source.exhausted


def test_replay_source_from_csv(tmp_path):
    path = tmp_path / "recording.csv"
    pd.DataFrame({'red': [100, 200], 'ir': [300, 400]}).to_csv(path, index=False)

    source = ReplaySampleSource.from_csv(str(path))
    assert len(source) == 2
    assert source.ir.tolist() == [300, 400]


def test_replay_source_requires_columns(tmp_path):
    path = tmp_path / "bad.csv"
    pd.DataFrame({'red': [1]}).to_csv(path, index=False)

    with pytest.raises(ValueError):
        ReplaySampleSource.from_csv(str(path))


def test_driver_source_drains_available_samples():
    driver = FakeDriver([(1000, 2000), (0, 0), (3000, 4000)], temperature=31.5)
    source = DriverSampleSource(driver, settle_delay=0)
    buffer = [Sample(0, 0)] * 16

    # Empty FIFO reads (zeros) are dropped
    assert source.read_batch(buffer) == 2
    assert buffer[:2] == [Sample(1000, 2000), Sample(3000, 4000)]
    assert source.read_batch(buffer) == 0

    assert source.read_temperature() == 31.5
    assert driver.conversions == 1


def test_driver_source_without_batch_support_reads_one():
    class MinimalDriver:
        def read_fifo(self):
            return 5000, 6000

    source = DriverSampleSource(MinimalDriver())
    buffer = [Sample(0, 0)] * 4
    assert source.read_batch(buffer) == 1
    assert source.read_temperature() is None


def test_replay_reports_metrics_every_display_interval(replay_config):
    red, ir = recording()
    sink = MemorySink()
    collector = MAX30102Collector(ReplaySampleSource(red, ir), sinks=[sink], config=replay_config)

    assert collector.run_until_exhausted() == 3000

    # 16 samples per poll -> 160 ms; a report every 13 polls
    times = [r.time_ms for r in sink.readings]
    assert times[0] == 2080
    assert all(b - a >= replay_config.display_interval_ms for a, b in zip(times, times[1:]))
    assert 60 in sink.values('heart_rate_bpm')
    assert collector.processor.get_reading().bpm == 60


def test_temperature_is_read_on_its_own_cadence():
    config = MAX30102Config(poll_interval=0.0, temperature_interval_polls=5)
    red, ir = recording(500)
    sink = MemorySink()
    collector = MAX30102Collector(ReplaySampleSource(red, ir, temperatures=[36.5]), sinks=[sink], config=config)

    for _ in range(5):
        collector.poll_once()

    assert sink.updates == [{'temperature_c': 36.5}]

    collector.run_until_exhausted()
    assert sink.updates[-1]['temperature_c'] == 36.5
    assert collector.get_status()['temperature_c'] == 36.5


def test_failing_sink_does_not_block_others(replay_config):
    red, ir = recording(400)
    sink = MemorySink()
    collector = MAX30102Collector(
        ReplaySampleSource(red, ir),
        sinks=[BrokenSink(), sink, LoggingSink()],
        config=replay_config,
    )

    collector.run_until_exhausted()
    assert len(sink.updates) == 1


def test_logging_sink_uses_its_weak_signal_range(caplog):
    reading = VitalsReading(time_ms=2000, signal_range=600)

    with caplog.at_level(logging.INFO):
        LoggingSink(weak_signal_range=800).report({'heart_rate_bpm': 0}, reading)
        LoggingSink().report({'heart_rate_bpm': 0}, reading)

    assert [r.getMessage() for r in caplog.records] == [
        "💓 Place finger firmly on sensor",
        "💓 Detecting heartbeat...",
    ]


def test_collector_options_are_keyword_only(replay_config):
    source = ReplaySampleSource(*recording(100))

    with pytest.raises(TypeError):
        MAX30102Collector(source, MAX30102Processor(replay_config))

    collector = MAX30102Collector(source, processor=MAX30102Processor(replay_config))
    assert collector.source is source
    assert collector.config is collector.processor.config


def test_collector_reports_zero_count_polls_as_noop(replay_config):
    collector = MAX30102Collector(ReplaySampleSource([], []), config=replay_config)

    assert collector.poll_once() == 0
    assert collector.get_status()['samples_processed'] == 0
    assert collector.report_count == 0


def test_background_thread_processes_source():
    config = MAX30102Config(poll_interval=0.001)
    red, ir = recording(1000)
    source = ReplaySampleSource(red, ir)
    collector = MAX30102Collector(source, processor=MAX30102Processor(config))

    collector.start()
    assert collector.is_running

    deadline = time.time() + 10
    while not source.exhausted and time.time() < deadline:
        time.sleep(0.01)
    collector.stop()

    assert not collector.is_running
    assert collector.get_status()['samples_processed'] == 1000


def test_collection_loop_survives_source_errors():
    class FlakySource:
        def __init__(self):
            self.calls = 0

        def read_batch(self, buffer):
            self.calls += 1
            if self.calls == 1:
                raise OSError("I2C bus error")
            return 0

    source = FlakySource()
    collector = MAX30102Collector(source, config=MAX30102Config(poll_interval=0.001))
    collector.start()

    deadline = time.time() + 5
    while source.calls < 3 and time.time() < deadline:
        time.sleep(0.01)
    collector.stop()

    assert source.calls >= 3


def test_coordinator_manages_independent_sensors(replay_config):
    left = MAX30102Collector(ReplaySampleSource(*recording(200)), config=replay_config)
    right = MAX30102Collector(ReplaySampleSource(*recording(300)), config=replay_config)

    with SensorCoordinator('session-1') as coordinator:
        coordinator.register_sensor('left', left)
        coordinator.register_sensor('right', right)
        assert coordinator.start_all_sensors() == []
        assert left.is_running and right.is_running

        status = coordinator.get_coordinator_status()
        assert status['session_id'] == 'session-1'
        assert status['registered_sensors'] == ['left', 'right']
        assert status['sensors']['left']['sensor_type'] == 'MAX30102'

    assert not left.is_running and not right.is_running
    assert left.processor is not right.processor


def test_coordinator_unknown_sensor():
    coordinator = SensorCoordinator()

    with pytest.raises(ValueError):
        coordinator.start_sensor('max30102')
    assert coordinator.get_sensor_status('max30102') is None
    assert len(coordinator.session_id) == 36
