# Pulse System - DB package
# Persistence of reported vitals metrics.
#
# Modules:
#   models     - MetricReading ORM model and get_db_connection()
#   db_access  - VitalsDB class and DatabaseSink reporting sink

from .db_access import VitalsDB, DatabaseSink

__all__ = [
    'VitalsDB',
    'DatabaseSink',
]
