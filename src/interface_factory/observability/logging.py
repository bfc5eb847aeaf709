from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import Protocol

from interface_factory.config.models import LoggingSettings

LEVELS: dict[str, int] = {"debug": 10, "info": 20, "warning": 30, "error": 40}


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log payload emitted by the factory.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")
        if self.level not in LEVELS:
            raise ValueError(f"Unknown log level: {self.level}")


class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None: ...


class NullLogSink:
    # Default sink: logging disabled.
    def emit(self, message: LogMessage) -> None:
        _ = message


class StdoutLogSink:
    # One JSON object per line on stdout.
    def emit(self, message: LogMessage) -> None:
        print(render_log_line(message))


class JsonlLogSink:
    # Appends JSON lines to a file; the file is held open only while a line is written.
    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, message: LogMessage) -> None:
        line = render_log_line(message)
        with self._lock, self.path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


@dataclass(slots=True)
class StructuredLogger:
    # Level-filtering front end over a single sink.
    sink: LogSink = field(default_factory=NullLogSink)
    level: str = "info"

    def __post_init__(self) -> None:
        if self.level not in LEVELS:
            raise ValueError(f"Unknown log level: {self.level}")

    def enabled_for(self, level: str) -> bool:
        return LEVELS[level] >= LEVELS[self.level]

    def log(self, level: str, message: str, **fields: object) -> None:
        if not self.enabled_for(level):
            return
        self.sink.emit(LogMessage(level=level, message=message, fields=dict(fields)))

    def debug(self, message: str, **fields: object) -> None:
        self.log("debug", message, **fields)

    def info(self, message: str, **fields: object) -> None:
        self.log("info", message, **fields)

    def warning(self, message: str, **fields: object) -> None:
        self.log("warning", message, **fields)


def build_log_sink(settings: LoggingSettings) -> LogSink:
    if settings.sink == "stdout":
        return StdoutLogSink()
    if settings.sink == "jsonl":
        if not settings.path:
            raise ValueError("logging.path must be a non-empty string for the jsonl sink")
        return JsonlLogSink(Path(settings.path))
    return NullLogSink()


def build_logger(settings: LoggingSettings, sink: LogSink | None = None) -> StructuredLogger:
    # An explicit sink overrides the configured one (tests, embedding applications).
    return StructuredLogger(sink=sink if sink is not None else build_log_sink(settings), level=settings.level)


def render_log_line(message: LogMessage) -> str:
    # Compact JSON; field values that are not JSON types (types, paths) are rendered with str().
    payload = {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
