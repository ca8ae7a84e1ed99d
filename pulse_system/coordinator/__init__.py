"""
Pulse System Sensor Coordinator
Logical time base and lifecycle management for sensor sessions
"""

from .clock import LogicalClock
from .coordinator import SensorCoordinator

__all__ = [
    'LogicalClock',
    'SensorCoordinator',
]

__version__ = '1.0.0'
