"""Test-runner log line parsing."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone

from sdetkit.errors import LogFormatError

_MIN_PARTS = 6
_REQUIRED_KEYS = ("suite", "test", "status", "durationms")


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    level: str
    suite: str
    test: str
    duration_ms: int
    status: str
    error: str | None = None


def _parse_timestamp(raw: str, line: str) -> datetime:
    text = raw[:-1] + "+00:00" if raw[-1:] in ("Z", "z") else raw
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise LogFormatError(f"Bad timestamp: {raw}", line=line) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_fields(tokens: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep or not key:
            continue
        fields[key.lower()] = value
    return fields


def parse_line(line: str) -> LogEntry:
    """Parse ``<timestamp> <LEVEL> Key=Value ...`` into a :class:`LogEntry`.

    Raises :class:`LogFormatError` when the line is too short, the timestamp
    is not ISO-8601, a required key is missing, or ``DurationMs`` is not an
    integer.
    """
    parts = line.split()
    if len(parts) < _MIN_PARTS:
        raise LogFormatError(f"Invalid log line: {line.strip()}", line=line)

    timestamp = _parse_timestamp(parts[0], line)
    fields = _parse_fields(parts[2:])
    for key in _REQUIRED_KEYS:
        if key not in fields:
            raise LogFormatError(f"Missing {_display_key(key)}: {line.strip()}", line=line)

    try:
        duration = int(fields["durationms"])
    except ValueError as exc:
        raise LogFormatError(f"Bad DurationMs: {line.strip()}", line=line) from exc

    return LogEntry(
        timestamp=timestamp,
        level=parts[1],
        suite=fields["suite"],
        test=fields["test"],
        duration_ms=duration,
        status=fields["status"],
        error=fields.get("error"),
    )


def _display_key(key: str) -> str:
    return "DurationMs" if key == "durationms" else key.capitalize()


def parse_lines(lines: Iterable[str]) -> Iterator[LogEntry]:
    for line in lines:
        yield parse_line(line)
