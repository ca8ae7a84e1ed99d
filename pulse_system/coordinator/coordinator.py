"""
Sensor Coordinator
Manages lifecycle of independent pulse-oximetry sensor sessions
"""

import logging
import uuid
from typing import Dict, Optional, Any

logger = logging.getLogger(__name__)


class SensorCoordinator:
    """
    Coordinates one or more sensor collectors for a monitoring session

    Responsibilities:
    - Manage sensor lifecycle (start/stop)
    - Track sensor status
    - Handle graceful shutdown

    Collectors share nothing: each owns its processor, estimators and
    logical clock, so no locking is needed between them.
    """

    def __init__(self, session_id: Optional[str] = None):
        """
        Initialize sensor coordinator

        Args:
            session_id: Identifier of the monitoring session (generated if omitted)
        """
        self.session_id = str(session_id) if session_id else str(uuid.uuid4())

        # Sensor registry
        self.sensors: Dict[str, Any] = {}

        logger.info(f"Sensor Coordinator initialized for session {self.session_id}")

    def register_sensor(self, sensor_name: str, sensor_instance: Any):
        """
        Register a sensor with the coordinator

        Args:
            sensor_name: Unique identifier for sensor (e.g., 'max30102', 'max30102_left')
            sensor_instance: Collector instance
        """
        if sensor_name in self.sensors:
            logger.warning(f"Sensor '{sensor_name}' already registered, replacing")

        self.sensors[sensor_name] = sensor_instance
        logger.info(f"✓ Registered sensor: {sensor_name}")

    def start_sensor(self, sensor_name: str):
        """
        Start a registered sensor

        Args:
            sensor_name: Name of sensor to start
        """
        if sensor_name not in self.sensors:
            logger.error(f"Sensor '{sensor_name}' not registered")
            raise ValueError(f"Unknown sensor: {sensor_name}")

        try:
            self.sensors[sensor_name].start()
            logger.info(f"✓ Started sensor: {sensor_name}")
        except Exception as e:
            logger.error(f"✗ Failed to start sensor '{sensor_name}': {e}", exc_info=True)
            raise

    def stop_sensor(self, sensor_name: str):
        """
        Stop a registered sensor

        Args:
            sensor_name: Name of sensor to stop
        """
        if sensor_name not in self.sensors:
            logger.warning(f"Sensor '{sensor_name}' not registered")
            return

        try:
            self.sensors[sensor_name].stop()
            logger.info(f"✓ Stopped sensor: {sensor_name}")
        except Exception as e:
            logger.error(f"✗ Error stopping sensor '{sensor_name}': {e}", exc_info=True)

    def start_all_sensors(self) -> list:
        """
        Start all registered sensors

        Returns:
            list: Names of sensors that failed to start
        """
        logger.info(f"Starting {len(self.sensors)} sensors...")
        failed = []

        for sensor_name in self.sensors:
            try:
                self.start_sensor(sensor_name)
            except Exception:
                logger.error(f"Failed to start {sensor_name}, continuing with others")
                failed.append(sensor_name)

        logger.info("✓ All sensors started" if not failed else f"Sensors started, failed: {failed}")
        return failed

    def stop_all_sensors(self):
        """Stop all running sensors"""
        logger.info(f"Stopping {len(self.sensors)} sensors...")

        for sensor_name, sensor in self.sensors.items():
            if getattr(sensor, 'is_running', True):
                self.stop_sensor(sensor_name)

        logger.info("✓ All sensors stopped")

    def get_sensor_status(self, sensor_name: str) -> Optional[dict]:
        """
        Get status of a specific sensor

        Args:
            sensor_name: Name of sensor

        Returns:
            dict: Sensor status or None if not found
        """
        if sensor_name not in self.sensors:
            return None

        sensor = self.sensors[sensor_name]

        if hasattr(sensor, 'get_status'):
            return sensor.get_status()

        return {'sensor_name': sensor_name, 'registered': True}

    def get_coordinator_status(self) -> dict:
        """
        Get overall coordinator status

        Returns:
            dict: Coordinator status information
        """
        return {
            'session_id': self.session_id,
            'registered_sensors': list(self.sensors.keys()),
            'sensor_count': len(self.sensors),
            'sensors': {name: self.get_sensor_status(name) for name in self.sensors},
        }

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cleanup"""
        self.stop_all_sensors()

    def __repr__(self):
        return f"<SensorCoordinator(session={self.session_id}, sensors={len(self.sensors)})>"
