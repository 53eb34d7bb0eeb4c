"""
CSV trace file parser for event logs.

Reads event traces in CSV format and constructs Event objects. The
matcher requires events sorted ascending by timestamp, so the reader
can either validate that order or sort the events itself.
"""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import List

from tempex.core.event import Event, to_nanos

_REQUIRED_HEADERS = {"name", "timestamp"}


class TraceReader:
    """
    Parses CSV trace files into Event objects.

    Expected CSV format::

        # Comment lines and blank lines are ignored
        name,timestamp
        signup,2024-03-01T09:00:00+00:00
        purchase,1709290800000000000

    Timestamps are either integer nanoseconds since the Unix epoch or
    ISO-8601 datetimes (naive datetimes are taken as UTC). Extra columns
    are ignored.

    Attributes:
        filepath: Path to the trace CSV file.
    """

    def __init__(self, filepath: Path) -> None:
        """
        Initialize reader with file path.

        Args:
            filepath: Path to the CSV trace file.
        """
        self.filepath: Path = Path(filepath)

    def read_events(self, sort: bool = False) -> List[Event]:
        """
        Read all events from the file.

        Args:
            sort: Stable-sort events by timestamp before returning.

        Returns:
            List of Event objects in file order (or timestamp order).

        Raises:
            FileNotFoundError: If the trace file does not exist.
            ValueError: If headers are missing or a row is malformed.
        """
        if not self.filepath.exists():
            raise FileNotFoundError(f"Trace file not found: {self.filepath}")

        lines = self._read_data_lines()
        if not lines:
            return []

        reader = csv.DictReader(lines)
        headers = set(reader.fieldnames or [])

        missing = _REQUIRED_HEADERS - headers
        if missing:
            raise ValueError(f"Missing required headers: {sorted(missing)}")

        events: List[Event] = []
        for line_no, row in enumerate(reader, start=2):
            try:
                events.append(self._parse_event_row(row))
            except ValueError as exc:
                raise ValueError(f"Row {line_no}: {exc}") from exc

        if sort:
            events.sort(key=lambda e: e.timestamp)
        return events

    def validate(self) -> List[str]:
        """
        Validate the trace file and return a list of error strings.

        Validates:
        - Required headers are present
        - Timestamps are parseable
        - Events are sorted ascending by timestamp

        Returns:
            List of error messages (empty if valid).
        """
        errors: List[str] = []

        if not self.filepath.exists():
            errors.append(f"File not found: {self.filepath}")
            return errors

        lines = self._read_data_lines()
        if not lines:
            errors.append("No data rows found in file")
            return errors

        reader = csv.DictReader(lines)
        headers = set(reader.fieldnames or [])

        missing = _REQUIRED_HEADERS - headers
        if missing:
            errors.append(f"Missing required headers: {sorted(missing)}")
            return errors

        previous = None
        for line_no, row in enumerate(reader, start=2):
            try:
                timestamp = self.parse_timestamp(row["timestamp"] or "")
            except ValueError as exc:
                errors.append(f"Row {line_no}: {exc}")
                continue
            if previous is not None and timestamp < previous:
                errors.append(f"Row {line_no}: timestamp earlier than previous event")
            previous = timestamp

        return errors

    # ------------------------------------------------------------------ #
    # Static helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def parse_timestamp(s: str) -> int:
        """
        Parse a timestamp string into epoch nanoseconds.

        Args:
            s: Integer nanoseconds or an ISO-8601 datetime.

        Returns:
            The timestamp in nanoseconds since the Unix epoch.

        Raises:
            ValueError: If the string is neither form.
        """
        s = s.strip()
        if not s:
            raise ValueError("empty timestamp")
        try:
            return int(s)
        except ValueError:
            pass
        try:
            return to_nanos(datetime.fromisoformat(s))
        except ValueError:
            raise ValueError(f"invalid timestamp '{s}'") from None

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _read_data_lines(self) -> List[str]:
        """Read non-comment, non-empty lines from the file."""
        lines: List[str] = []
        with open(self.filepath, encoding="utf-8") as f:
            for line in f:
                stripped = line.strip()
                if stripped and not stripped.startswith("#"):
                    lines.append(stripped)
        return lines

    def _parse_event_row(self, row: dict) -> Event:
        """Parse a single CSV row into an Event."""
        name = (row["name"] or "").strip()
        timestamp = self.parse_timestamp(row["timestamp"] or "")
        return Event(name=name, timestamp=timestamp)
