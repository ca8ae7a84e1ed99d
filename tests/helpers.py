"""
Signal helpers for the pulse system tests

Synthetic PPG signals: a flat baseline with one-sample pulses. After DC
removal the pulses are the only positive samples, so peak timing is exact.
"""

BASELINE = 50000
PULSE = 20000
SAMPLE_MS = 10


def pulse_train(n_samples, pulse_counters, baseline=BASELINE, amplitude=PULSE):
    """
    IR samples with a pulse at each listed sample counter.

    Counters are 1-based, matching the estimator's sample counter; the
    sample with counter c is taken at logical time (c - 1) * 10 ms.
    """
    signal = [baseline] * n_samples
    for c in pulse_counters:
        if 1 <= c <= n_samples:
            signal[c - 1] = baseline + amplitude
    return signal


def periodic_counters(n_samples, period=100, phase=50):
    """Counters c <= n_samples with c % period == phase."""
    return [c for c in range(1, n_samples + 1) if c % period == phase]


def feed_heart_rate(estimator, signal, start_counter=1):
    """Feed IR samples with logical timestamps; returns the BPM after each sample."""
    out = []
    for i, ir in enumerate(signal):
        out.append(estimator.process_sample(ir, (start_counter - 1 + i) * SAMPLE_MS))
    return out

