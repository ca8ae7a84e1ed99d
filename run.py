#!/usr/bin/env python3
"""
Pulse System - Replay Entry Point
Runs a recorded MAX30102 session through the vitals pipeline:
  1. Load the red/IR recording (CSV with 'red' and 'ir' columns)
  2. Build processor, collector and reporting sinks
  3. Replay the recording batch by batch on the logical clock
  4. Optionally store reported metrics and print a session summary
  5. Optionally export per-sample readings to CSV

Usage:
    python run.py recording.csv
    python run.py recording.csv --db sqlite:///vitals.db --export readings.csv
"""

import sys
import uuid
import argparse
import logging

import pandas as pd

from db.db_access import VitalsDB, DatabaseSink
from pulse_system.sensors.max30102 import (
    MAX30102Collector,
    MAX30102Config,
    MAX30102Processor,
    ReplaySampleSource,
    LoggingSink,
)

logger = logging.getLogger('pulse')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Replay a MAX30102 recording through the vitals pipeline')
    parser.add_argument('recording', help="CSV file with 'red' and 'ir' columns")
    parser.add_argument('--db', default=None, help='SQLAlchemy URL to store reported metrics')
    parser.add_argument('--session-id', default=None, help='Session identifier (random if omitted)')
    parser.add_argument('--export', default=None, help='Write per-sample BPM/SpO2 to this CSV')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser.parse_args(argv)


def export_readings(source: ReplaySampleSource, config: MAX30102Config, path: str):
    """Offline pass on a fresh processor so the live replay is unaffected"""
    bpm, spo2 = MAX30102Processor(config).process_recording(source.red, source.ir)
    pd.DataFrame({
        'time_ms': [i * config.sample_period_ms for i in range(len(bpm))],
        'red': source.red,
        'ir': source.ir,
        'bpm': bpm,
        'spo2': spo2,
    }).to_csv(path, index=False)
    logger.info(f"✓ Exported {len(bpm)} readings to {path}")


def replay(source: ReplaySampleSource, config: MAX30102Config, sinks: list) -> MAX30102Processor:
    processor = MAX30102Processor(config)
    collector = MAX30102Collector(source, processor=processor, sinks=sinks, config=config)
    collector.run_until_exhausted()

    reading = processor.get_reading()
    logger.info(
        f"Final: {reading.status_message(config.weak_signal_range)} | SpO2 {reading.spo2 or '--'}% | "
        f"{reading.samples_processed} samples, {reading.time_ms / 1000:.1f}s"
    )
    return processor


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )

    session_id = args.session_id or str(uuid.uuid4())

    try:
        source = ReplaySampleSource.from_csv(args.recording)
    except (OSError, ValueError) as e:
        logger.error(f"✗ Could not load recording: {e}")
        return 1

    config = MAX30102Config.for_replay()
    sinks = [LoggingSink(weak_signal_range=config.weak_signal_range)]

    if args.export:
        export_readings(source, config, args.export)

    if not args.db:
        replay(source, config, sinks)
        return 0

    with VitalsDB(args.db) as db:
        replay(source, config, sinks + [DatabaseSink(db, session_id)])
        summary = db.summarize_session(session_id)
        logger.info(f"Session {session_id} summary: {summary}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
