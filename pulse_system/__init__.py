"""
Pulse System
Real-time heart rate and SpO2 estimation from pulse-oximeter samples
"""

__version__ = '1.0.0'
