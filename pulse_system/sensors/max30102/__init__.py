"""
MAX30102 Sensor Module for the Pulse System
Heart rate and SpO2 estimation from MAX30102 red/IR samples

Architecture:
- Filters: fixed-point DC removal shared by both estimators
- HeartRateEstimator: adaptive-threshold peak detection on the IR channel
- SaturationEstimator: windowed ratio-of-ratios SpO2
- Processor: runs each sample through both estimators on a logical clock
- Collector: polling loop between a sample source and reporting sinks
"""

from .config import MAX30102Config
from .filters import BaselineRemover, HEART_RATE_ALPHA, SPO2_ALPHA
from .heart_rate import HeartRateEstimator
from .spo2 import SaturationEstimator
from .processor import MAX30102Processor, Sample, VitalsReading
from .sources import ReplaySampleSource, DriverSampleSource
from .sinks import LoggingSink, MemorySink
from .collector import MAX30102Collector

__all__ = [
    'MAX30102Config',
    'BaselineRemover',
    'HEART_RATE_ALPHA',
    'SPO2_ALPHA',
    'HeartRateEstimator',
    'SaturationEstimator',
    'MAX30102Processor',
    'Sample',
    'VitalsReading',
    'ReplaySampleSource',
    'DriverSampleSource',
    'LoggingSink',
    'MemorySink',
    'MAX30102Collector',
]

__version__ = '1.0.0'
