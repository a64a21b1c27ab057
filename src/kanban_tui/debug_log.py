"""In-app log capture.

Records from the `kanban_tui` logger hierarchy land in a ring buffer that the Log
panel renders; `--log-file` dumps the buffer on exit.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from kanban_tui.limits import MAX_LOG_LINES, MAX_LOG_MESSAGE_LENGTH


@dataclass(slots=True)
class LogEntry:
    group: str  # Level name (DEBUG, INFO, WARNING, ERROR)
    message: str
    timestamp: float
    logger_name: str = "kanban_tui"


log_buffer: deque[LogEntry] = deque(maxlen=MAX_LOG_LINES)


def _truncate(output: str) -> str:
    if len(output) > MAX_LOG_MESSAGE_LENGTH:
        return output[:MAX_LOG_MESSAGE_LENGTH] + "... [truncated]"
    return output


class DebugLogHandler(logging.Handler):
    """Logging handler that captures records into the panel buffer."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            log_buffer.append(
                LogEntry(
                    group=record.levelname,
                    message=_truncate(self.format(record)),
                    timestamp=record.created,
                    logger_name=record.name,
                )
            )
        except Exception:
            self.handleError(record)


_handler: DebugLogHandler | None = None


def setup_debug_logging(level: int = logging.DEBUG) -> None:
    """Attach the buffer handler to the `kanban_tui` logger.

    Calling it again only adjusts the level.
    """
    global _handler

    package_logger = logging.getLogger("kanban_tui")
    package_logger.setLevel(level)
    if _handler is not None:
        return

    _handler = DebugLogHandler()
    _handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(_handler)
    package_logger.info("Debug logging initialized")


def clear_log_buffer() -> None:
    log_buffer.clear()


def tail(count: int) -> list[LogEntry]:
    """Return the newest `count` entries, oldest first."""
    if count <= 0:
        return []
    return list(log_buffer)[-count:]


def export_logs_to_file(file_path: str | Path) -> int:
    """Write the buffer to `file_path`; returns the number of entries written."""
    output_path = Path(file_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", encoding="utf-8") as f:
        f.write("# kanban-tui debug log export\n")
        f.write(f"# Total entries: {len(log_buffer)}\n")
        f.write("# " + "=" * 76 + "\n\n")

        for entry in log_buffer:
            ts = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
            f.write(f"{ts} [{entry.group}] {entry.logger_name}: {entry.message}\n")

    return len(log_buffer)
