"""
Structured logging for the completion pipeline.

Tracks request fan-out, round trips, stale drops and accept-time side effects
without cluttering the pipeline code.

Logs are organized in date-stamped folders with a separate file per level:
  logs/YYYY-MM-DD/debug.log
  logs/YYYY-MM-DD/info.log
  logs/YYYY-MM-DD/warning.log
  logs/YYYY-MM-DD/error.log
"""

import logging
import json
import time
from pathlib import Path
from typing import Any, Dict, Optional
from datetime import datetime, timezone


class ComplineLogger:
    """Centralized logger for completion requests and acceptance."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self.logger = logging.getLogger("compline")
            self.json_mode = False
            self.session_start = time.time()
            self.log_dir = None
            self._initialized = True

    def _get_default_log_dir(self) -> Path:
        """Get the default log directory path with today's date."""
        today = datetime.now().strftime("%Y-%m-%d")
        return Path("logs") / today

    def configure(
        self,
        level: str = "INFO",
        log_dir: Optional[str] = None,
        json_mode: bool = False,
        enable_logging: bool = True,
    ):
        """
        Configure logging output.

        Args:
            level: DEBUG, INFO, WARNING, ERROR (minimum level to log)
            log_dir: Optional directory for logs (default: logs/YYYY-MM-DD/)
            json_mode: Use JSON format for structured parsing
            enable_logging: Enable file logging (default: True)
        """
        if not enable_logging:
            return

        self.json_mode = json_mode
        self.logger.handlers.clear()
        self.logger.setLevel(logging.DEBUG)

        if log_dir:
            self.log_dir = Path(log_dir)
        else:
            self.log_dir = self._get_default_log_dir()

        self.log_dir.mkdir(parents=True, exist_ok=True)

        if json_mode:
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(component)-8s] %(message)s',
                datefmt='%H:%M:%S',
                defaults={'component': 'SYSTEM'},
            )

        min_level = getattr(logging, level.upper(), logging.INFO)

        log_levels = [
            (logging.DEBUG, 'debug.log'),
            (logging.INFO, 'info.log'),
            (logging.WARNING, 'warning.log'),
            (logging.ERROR, 'error.log'),
        ]

        for log_level, filename in log_levels:
            if log_level >= min_level:
                log_path = self.log_dir / filename
                handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
                handler.setLevel(log_level)
                handler.setFormatter(formatter)

                # Only the exact level goes to each file
                handler.addFilter(lambda record, level=log_level: record.levelno == level)

                self.logger.addHandler(handler)

    def get_log_directory(self) -> Optional[Path]:
        """Get the current log directory path."""
        return self.log_dir

    def _log(self, level: str, component: str, msg: str, **data):
        """Core logging with structured data."""
        extra = {'component': component, **data}
        getattr(self.logger, level)(msg, extra=extra)

    # === REQUESTS ===

    def request_dispatch(self, surface_id: Any, provider_ids: list, trigger_kind: int):
        self._log('debug', 'REQUEST',
                  f"Dispatch to {len(provider_ids)} provider(s) on {surface_id} (trigger kind {trigger_kind})",
                  surface=str(surface_id), providers=[str(p) for p in provider_ids],
                  trigger_kind=trigger_kind)

    def request_complete(self, surface_id: Any, elapsed_ms: float, rtt_ms: float):
        self._log('debug', 'REQUEST',
                  f"Batch on {surface_id} settled in {elapsed_ms:.1f}ms (rtt estimate {rtt_ms:.1f}ms)",
                  surface=str(surface_id), elapsed_ms=elapsed_ms, rtt_ms=rtt_ms)

    def request_cancelled(self, surface_id: Any, pending: int):
        self._log('debug', 'REQUEST', f"Cancelled batch on {surface_id} ({pending} pending)",
                  surface=str(surface_id), pending=pending)

    def batch_stale(self, surface_id: Any, reason: str):
        self._log('debug', 'REQUEST', f"Dropped stale batch on {surface_id}: {reason}",
                  surface=str(surface_id), reason=reason)

    def provider_error(self, provider: str, code: Any, message: str):
        self._log('warning', 'PROVIDER', f"{provider}: {code} {message}",
                  provider=provider, code=code, error=message)

    # === TRIGGERS ===

    def debounce(self, surface_id: Any, delay_ms: float):
        self._log('debug', 'TRIGGER', f"Continuation on {surface_id} in {delay_ms:.1f}ms",
                  surface=str(surface_id), delay_ms=delay_ms)

    def popup(self, surface_id: Any, start_col: int, count: int, incomplete: bool):
        self._log('info', 'TRIGGER',
                  f"Popup on {surface_id} at col {start_col}: {count} candidate(s)"
                  f"{' (incomplete)' if incomplete else ''}",
                  surface=str(surface_id), start_col=start_col, count=count,
                  incomplete=incomplete)

    # === ACCEPTANCE ===

    def accept_start(self, provider_id: Any, label: str, expand_snippet: bool):
        self._log('info', 'ACCEPT', f"Accepted '{label}' from {provider_id}",
                  provider=str(provider_id), label=label, expand_snippet=expand_snippet)

    def accept_branch(self, branch: str):
        self._log('debug', 'ACCEPT', f"Side effects via {branch}", branch=branch)

    def resolve_stale(self, provider_id: Any, before: int, after: int):
        self._log('debug', 'ACCEPT',
                  f"Dropped resolve from {provider_id}: buffer changed ({before} -> {after})",
                  provider=str(provider_id), before=before, after=after)

    def command(self, provider_id: Any, title: str):
        self._log('info', 'ACCEPT', f"Executing command '{title}' via {provider_id}",
                  provider=str(provider_id), title=title)

    # === ERRORS ===

    def error(self, component: str, message: str, exception: Optional[Exception] = None):
        import traceback

        error_details = message
        if exception:
            tb_str = ''.join(traceback.format_exception(type(exception), exception, exception.__traceback__))
            error_details = f"{message}\n{tb_str}"

        self._log('error', component.upper(), f"ERROR: {error_details}",
                  error=str(exception) if exception else message)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            'time': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'component': getattr(record, 'component', 'SYSTEM'),
            'message': record.getMessage(),
        }
        for k, v in record.__dict__.items():
            if k not in {'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
                        'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
                        'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
                        'thread', 'threadName', 'processName', 'process', 'message',
                        'component', 'asctime', 'taskName'}:
                data[k] = v
        return json.dumps(data, default=str)


# Global instance
logger = ComplineLogger()
