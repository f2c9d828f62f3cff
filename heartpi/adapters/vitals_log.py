"""
Vitals log: one row per assessment with all five simulated readings.

Kept in its own file, separate from the username-keyed record store.
"""

import csv
import os
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import structlog

from heartpi.domain.errors import StorageIOError
from heartpi.domain.models import Readings

logger = structlog.get_logger(__name__)

HEADER = ("Timestamp", "HeartRate", "SysBP", "DiaBP", "Cholesterol", "ECG")
TIMESTAMP_FORMAT = "%y-%m-%d %H:%M:%S"


class VitalsLog:
    """Append-only CSV log of readings, header written when the file is new."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self.logger = logger.bind(component="vitals_log", path=str(self.path))

    def record(self, readings: Readings, when: datetime | None = None) -> None:
        when = when or datetime.now()
        row = [
            when.strftime(TIMESTAMP_FORMAT),
            repr(readings.heart_rate),
            repr(readings.systolic_bp),
            repr(readings.diastolic_bp),
            repr(readings.cholesterol),
            repr(readings.ecg),
        ]
        try:
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, lineterminator="\n")
                if f.tell() == 0:
                    writer.writerow(HEADER)
                writer.writerow(row)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            self.logger.error("vitals_log_write_failed", error=str(e))
            raise StorageIOError(f"Cannot write vitals log {self.path}: {e}", str(self.path)) from e

    def entries(self) -> Iterator[tuple[datetime, Readings]]:
        """Logged readings in write order."""
        if not self.path.exists():
            return
        try:
            with open(self.path, newline="", encoding="utf-8") as f:
                for fields in csv.reader(f):
                    if len(fields) != len(HEADER) or tuple(fields) == HEADER:
                        continue
                    try:
                        when = datetime.strptime(fields[0].strip(), TIMESTAMP_FORMAT)
                        hr, sys_bp, dia_bp, chol, ecg = (float(v) for v in fields[1:])
                    except ValueError:
                        self.logger.warning("malformed_vitals_row_skipped")
                        continue
                    yield when, Readings(
                        heart_rate=hr,
                        systolic_bp=sys_bp,
                        diastolic_bp=dia_bp,
                        cholesterol=chol,
                        ecg=ecg,
                    )
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            self.logger.error("vitals_log_read_failed", error=str(e))
            raise StorageIOError(f"Cannot read vitals log {self.path}: {e}", str(self.path)) from e
