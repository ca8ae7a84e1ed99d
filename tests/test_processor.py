"""Tests for the MAX30102 processor and logical clock"""

import numpy as np
import pytest

from pulse_system.coordinator import LogicalClock
from pulse_system.sensors.max30102 import MAX30102Config, MAX30102Processor, Sample, VitalsReading

from tests.helpers import BASELINE, periodic_counters, pulse_train


def test_clock_advances_by_quantum():
    clock = LogicalClock(10)
    assert clock.now_ms() == 0
    assert clock.advance() == 10
    assert clock.advance(5) == 60
    assert clock.get_stats() == {'total_ticks': 6, 'time_ms': 60, 'quantum_ms': 10}

    clock.reset()
    assert clock.now_ms() == 0


def test_clock_rejects_invalid_use():
    with pytest.raises(ValueError):
        LogicalClock(0)
    with pytest.raises(ValueError):
        LogicalClock().advance(-1)


def test_each_sample_advances_clock():
    processor = MAX30102Processor()
    reading = processor.process_batch([Sample(BASELINE, BASELINE)] * 37)

    assert reading.time_ms == 370
    assert reading.samples_processed == 37


def test_empty_batch_is_noop():
    processor = MAX30102Processor()
    processor.process_batch([(BASELINE, BASELINE)] * 5)
    before = processor.get_reading()

    assert processor.process_batch([]) == before


def test_pulse_train_yields_sixty_bpm():
    n = 2500
    ir = pulse_train(n, periodic_counters(n))
    processor = MAX30102Processor()
    reading = processor.process_batch(zip([BASELINE] * n, ir))

    assert reading.bpm == 60
    assert 70 <= reading.spo2 <= 100
    assert reading.spo2_reliable


def test_processing_is_deterministic():
    rng = np.random.default_rng(42)
    red = rng.integers(20000, 80000, size=3000)
    ir = np.array(pulse_train(3000, periodic_counters(3000, period=80, phase=7))) + rng.integers(0, 300, size=3000)

    first = MAX30102Processor().process_recording(red, ir)
    second = MAX30102Processor().process_recording(red, ir)

    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1], second[1])


def test_process_recording_matches_sample_by_sample():
    n = 1500
    red = np.full(n, BASELINE)
    ir = np.array(pulse_train(n, periodic_counters(n)))

    bpm, spo2 = MAX30102Processor().process_recording(red, ir)

    processor = MAX30102Processor()
    expected = [processor.process_sample(r, i) for r, i in zip(red, ir)]
    assert bpm.tolist() == [r.bpm for r in expected]
    assert spo2.tolist() == [r.spo2 for r in expected]
    assert bpm[-1] == 60


def test_process_recording_rejects_mismatched_arrays():
    with pytest.raises(ValueError):
        MAX30102Processor().process_recording(np.zeros(10), np.zeros(11))


def test_reset_restarts_everything():
    n = 600
    processor = MAX30102Processor()
    processor.process_batch(zip([BASELINE] * n, pulse_train(n, periodic_counters(n))))
    assert processor.get_reading().bpm == 60

    processor.reset()
    reading = processor.get_reading()
    assert reading == VitalsReading()


def test_weak_samples_are_not_reliable():
    processor = MAX30102Processor()
    assert not processor.process_sample(3000, 3000).spo2_reliable
    assert processor.process_sample(6000, 6000).spo2_reliable


def test_reset_if_no_signal_forwards_to_heart_rate():
    processor = MAX30102Processor()
    processor.process_batch([(BASELINE, BASELINE)] * 1000)
    processor.heart_rate._bpm = 65

    processor.reset_if_no_signal()
    assert processor.get_reading().bpm == 0


@pytest.mark.parametrize("bpm,signal_range,weak_range,message", [
    (72, 0, 500, "Heart Rate: 72 BPM"),
    (0, 100, 500, "Place finger firmly on sensor"),
    (0, 499, 500, "Place finger firmly on sensor"),
    (0, 500, 500, "Detecting heartbeat..."),
    (0, 500, 800, "Place finger firmly on sensor"),
    (0, 200, 100, "Detecting heartbeat..."),
])
def test_status_message(bpm, signal_range, weak_range, message):
    assert VitalsReading(bpm=bpm, signal_range=signal_range).status_message(weak_range) == message


def test_status_message_default_threshold():
    assert VitalsReading(signal_range=499).status_message() == "Place finger firmly on sensor"


def test_sample_period_is_configurable():
    processor = MAX30102Processor(MAX30102Config(sample_period_ms=20))
    processor.process_batch([(BASELINE, BASELINE)] * 10)
    assert processor.get_reading().time_ms == 200


@pytest.mark.parametrize("kwargs", [
    {'hr_filter_alpha': (32, 32)},
    {'spo2_filter_alpha': (1, 0)},
    {'spo2_window_size': 0},
    {'hr_buffer_size': 2},
    {'hr_min_interval_ms': 1600},
    {'spo2_min': 101},
])
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        MAX30102Config(**kwargs)
