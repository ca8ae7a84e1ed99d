"""
Pulse System - Database Access Layer
Wraps the metric model to provide a simple interface for:
- Connecting to the database
- Writing metrics reported by the collector
- Summarising a monitoring session (averages and HRV)
"""

import logging
from typing import Dict, List, Optional

import numpy as np
from sqlalchemy.exc import SQLAlchemyError

from pulse_system.sensors.max30102.processor import VitalsReading

from .models import (
    MetricReading,
    METRIC_HEART_RATE,
    METRIC_SPO2,
    METRIC_TEMPERATURE,
    METRIC_SIGNAL_RANGE,
    get_db_connection,
)

logger = logging.getLogger(__name__)

DB_URL = 'sqlite:///vitals.db'

# HRV needs a minimum number of heart rate reports
MIN_HRV_READINGS = 10


class VitalsDB:
    """
    Database access layer for the pulse system.

    All operations use a single SQLAlchemy session created at init.

    Usage:
        db = VitalsDB('sqlite:///vitals.db')
        db.add_metric(session_id, 'heart_rate_bpm', 72, time_ms=2000)
        summary = db.summarize_session(session_id)
        db.close()
    """
    def __init__(self, url: str = None):
        try:
            self.engine, self.session = get_db_connection(url or DB_URL)
            logger.info(f"✓ Connected to {self.engine.url.render_as_string(hide_password=True)}")
        except Exception as e:
            logger.error(f"✗ Failed to connect to database: {e}")
            raise

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def add_metrics(self, rows: List[MetricReading]) -> bool:
        """
        Persist a group of metric rows in one commit.
        Args:
            rows: MetricReading objects to store.
        Returns:
            True if committed, False if the write was rolled back.
        """
        try:
            self.session.add_all(rows)
            self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"✗ Failed to store {len(rows)} metrics: {e}")
            return False

    def add_metric(self, session_id: str, metric_type: str, value: float,
                   time_ms: int, is_valid: bool = True) -> bool:
        """
        Persist a single metric value.
        Args:
            session_id:  Monitoring session identifier.
            metric_type: e.g. 'heart_rate_bpm', 'spo2_percent'.
            value:       Metric value.
            time_ms:     Logical time of the reading.
            is_valid:    Whether the value is considered reliable.
        Returns:
            True if committed, False otherwise.
        """
        row = MetricReading(
            session_id=str(session_id),
            metric_type=metric_type,
            value=float(value),
            time_ms=int(time_ms),
            is_valid=is_valid,
        )
        return self.add_metrics([row])

    def get_metrics(self, session_id: str, metric_type: Optional[str] = None,
                    valid_only: bool = False) -> List[MetricReading]:
        """
        Fetch metrics for a session ordered by logical time.
        Args:
            session_id:  Monitoring session identifier.
            metric_type: Restrict to one metric type.
            valid_only:  Skip rows flagged as unreliable.
        Returns:
            List of MetricReading rows (empty on error).
        """
        try:
            query = self.session.query(MetricReading).filter(
                MetricReading.session_id == str(session_id)
            )
            if metric_type:
                query = query.filter(MetricReading.metric_type == metric_type)
            if valid_only:
                query = query.filter(MetricReading.is_valid.is_(True))
            return query.order_by(MetricReading.time_ms, MetricReading.id).all()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching metrics for session {session_id}: {e}")
            return []

    def summarize_session(self, session_id: str) -> Dict[str, Optional[float]]:
        """
        Session averages and time-domain heart rate variability.

        RR intervals are derived from the reported heart rates
        (RR = 60000 / BPM). SDNN is their standard deviation, RMSSD the root
        mean square of successive differences. HRV fields are None when
        fewer than MIN_HRV_READINGS heart rate values were reported.

        Args:
            session_id: Monitoring session identifier.
        Returns:
            Dict with mean_bpm, mean_spo2, hrv_sdnn, hrv_rmssd and counts.
        """
        hr_values = np.array(
            [m.value for m in self.get_metrics(session_id, METRIC_HEART_RATE) if m.value > 0],
            dtype=float,
        )
        spo2_values = np.array(
            [m.value for m in self.get_metrics(session_id, METRIC_SPO2, valid_only=True) if m.value > 0],
            dtype=float,
        )

        summary = {
            'heart_rate_readings': int(len(hr_values)),
            'spo2_readings': int(len(spo2_values)),
            'mean_bpm': float(np.mean(hr_values)) if len(hr_values) else None,
            'mean_spo2': float(np.mean(spo2_values)) if len(spo2_values) else None,
            'hrv_sdnn': None,
            'hrv_rmssd': None,
        }

        if len(hr_values) < MIN_HRV_READINGS:
            logger.debug("Not enough HR data for HRV calculation")
            return summary

        rr_intervals = 60000.0 / hr_values
        successive_diffs = np.diff(rr_intervals)

        summary['hrv_sdnn'] = float(np.std(rr_intervals))
        summary['hrv_rmssd'] = float(np.sqrt(np.mean(successive_diffs ** 2)))

        logger.info(f"✓ HRV calculated: SDNN={summary['hrv_sdnn']:.2f}ms, RMSSD={summary['hrv_rmssd']:.2f}ms")
        return summary

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def close(self):
        """
        Close the SQLAlchemy session and dispose of the engine.
        Returns:
            None.
        """
        try:
            self.session.close()
            self.engine.dispose()
            logger.info("✓ DB session closed")
        except Exception as e:
            logger.error(f"Error closing DB session: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class DatabaseSink:
    """
    Reporting sink that stores every metric update as MetricReading rows.

    Undetermined heart rate and SpO2 values (0) are not stored. SpO2 rows
    are flagged invalid while the signal is too weak to be reliable.
    """

    def __init__(self, db: VitalsDB, session_id: str):
        self.db = db
        self.session_id = str(session_id)
        self.rows_written = 0

    def report(self, metrics: Dict[str, float], reading: VitalsReading):
        rows = []

        for metric_type, value in metrics.items():
            if metric_type in (METRIC_HEART_RATE, METRIC_SPO2) and not value:
                continue
            if metric_type not in (METRIC_HEART_RATE, METRIC_SPO2, METRIC_TEMPERATURE, METRIC_SIGNAL_RANGE):
                logger.warning(f"Ignoring unknown metric '{metric_type}'")
                continue

            rows.append(MetricReading(
                session_id=self.session_id,
                metric_type=metric_type,
                value=float(value),
                time_ms=reading.time_ms,
                is_valid=reading.spo2_reliable if metric_type == METRIC_SPO2 else True,
            ))

        if rows and self.db.add_metrics(rows):
            self.rows_written += len(rows)

    def __repr__(self):
        return f"<DatabaseSink(session={self.session_id}, rows={self.rows_written})>"
