from .logging import (
    JsonlLogSink,
    LogMessage,
    LogSink,
    NullLogSink,
    StdoutLogSink,
    StructuredLogger,
    build_log_sink,
    build_logger,
    render_log_line,
)

__all__ = [
    "JsonlLogSink",
    "LogMessage",
    "LogSink",
    "NullLogSink",
    "StdoutLogSink",
    "StructuredLogger",
    "build_log_sink",
    "build_logger",
    "render_log_line",
]
