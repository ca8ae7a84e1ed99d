"""
Pulse System - Database Models
ORM model for reported vitals metrics and connection helper
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()

# metric_type values written by the reporting sink
METRIC_HEART_RATE = 'heart_rate_bpm'
METRIC_SPO2 = 'spo2_percent'
METRIC_TEMPERATURE = 'temperature_c'
METRIC_SIGNAL_RANGE = 'signal_range'


class MetricReading(Base):
    """One metric value reported by the collector"""
    __tablename__ = 'metric_readings'

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(36), nullable=False, index=True)
    metric_type = Column(String(32), nullable=False, index=True)
    value = Column(Float, nullable=False)
    time_ms = Column(Integer, nullable=False)  # logical sample time
    recorded_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    is_valid = Column(Boolean, default=True)

    def __repr__(self):
        return f"<MetricReading({self.metric_type}={self.value} @ {self.time_ms} ms)>"


def get_db_connection(url: str = 'sqlite:///vitals.db', echo: bool = False):
    """
    Create an engine and session, creating tables if needed.
    Args:
        url:  SQLAlchemy database URL.
        echo: Log emitted SQL.
    Returns:
        Tuple of (engine, session).
    """
    engine = create_engine(url, echo=echo)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    return engine, session
