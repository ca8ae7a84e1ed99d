"""
Pulse System Sensors

Available Sensors:
- MAX30102: Heart rate and SpO2 pulse oximeter (100 Hz)

Sensors follow the same layout:
- Config dataclass holding thresholds and calibration constants
- Processor turning raw samples into metrics
- Collector owning the polling loop and metric reporting
"""

from .max30102 import MAX30102Collector, MAX30102Processor, MAX30102Config

__all__ = [
    # MAX30102 (Heart Rate + SpO2)
    'MAX30102Collector',
    'MAX30102Processor',
    'MAX30102Config',
]

__version__ = '1.0.0'
