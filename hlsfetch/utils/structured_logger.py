"""
Structured logging system for download events.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("hlsfetch", log_dir=Path("logs"))
        logger.info("download_completed",
                    url="https://cdn.example/index.m3u8",
                    segments=120,
                    size_mb=45.2)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"hlsfetch_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            # Square brackets would be read as Rich markup by the console handler.
            self._logger.log(
                level, self._format_message(event, **context), extra={"markup": False}
            )
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class DownloadLogger:
    """Specialized logger for HLS download events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def download_started(self, url: str, output_path: str, max_workers: int):
        self.logger.info(
            "download_started",
            url=url,
            output_path=output_path,
            max_workers=max_workers,
        )

    def playlist_resolved(
        self, url: str, segments: int, total_duration_s: float, end_list: bool
    ):
        self.logger.debug(
            "playlist_resolved",
            url=url,
            segments=segments,
            total_duration_s=round(total_duration_s, 2),
            end_list=end_list,
        )

    def segment_failed(self, index: int, error: str):
        self.logger.warning("segment_failed", index=index, error=error)

    def download_completed(
        self,
        url: str,
        segments: int,
        segments_failed: int,
        size_bytes: int,
        duration_s: float,
    ):
        self.logger.info(
            "download_completed",
            url=url,
            segments=segments,
            segments_failed=segments_failed,
            size_bytes=size_bytes,
            size_mb=round(size_bytes / (1024 * 1024), 2),
            duration_s=round(duration_s, 2),
        )

    def download_failed(self, url: str, error: str, error_type: str):
        """Log download failed, including cancellation."""
        self.logger.error(
            "download_failed", url=url, error=error, error_type=error_type
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, DownloadLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, download_logger)
    """
    base = StructuredLogger("hlsfetch.events", log_dir=log_dir, enable_json=enable_json)
    return base, DownloadLogger(base)
