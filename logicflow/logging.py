"""
Logging for the compiler and runtime.

Two channels:

- Text logs: ``get_logger(module)`` returns a FlowLogger printing
  ``[module] LEVEL: message`` lines, filtered by a global level and optional
  per-module overrides. ``log.step(...)`` traces each executed operation
  when step tracing is on.
- Lifecycle records: ``emit_record(module, record)`` hands a JSON-ready dict
  to the installed record sink. The runtime emits ``instance_started``,
  ``instance_completed`` and ``instance_aborted``. With no sink installed
  records are dropped.

Usage:
    from logicflow.logging import get_logger

    log = get_logger('runtime')
    log.info("Simulation started")
    log.step("cube", Move(axis='x', amount=1.0))

Configuration (read once at import):
    LOGICFLOW_LOG_LEVEL=DEBUG      # Global level (default INFO)
    LOGICFLOW_LOG_RUNTIME=DEBUG    # Level for one module
    LOGICFLOW_LOG_STEPS=1          # Trace every executed operation
    LOGICFLOW_LOG_RECORDS=1        # Write lifecycle records to LOGICFLOW_LOG_DIR
    LOGICFLOW_LOG_DIR=./logs       # Where record files go (default ./logs)

or at runtime with ``configure_logging(...)``.
"""

import json
import os
import time
import traceback
from abc import ABC, abstractmethod
from enum import IntEnum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    OFF = 100


# Printed names; WARNING is shortened to keep columns tidy
_LEVEL_NAMES = {
    LogLevel.DEBUG: 'DEBUG',
    LogLevel.INFO: 'INFO',
    LogLevel.WARNING: 'WARN',
    LogLevel.ERROR: 'ERROR',
}

_ENV_PREFIX = 'LOGICFLOW_LOG_'

_settings: Dict[str, Any] = {
    'level': LogLevel.INFO,
    'modules': {},       # module -> LogLevel
    'steps': False,
    'records': False,    # write lifecycle records to a file
    'log_dir': None,     # None means ./logs
}


def parse_level(name: str) -> LogLevel:
    """Level for a name like 'debug' or 'WARN'; unknown names give INFO."""
    name = name.strip().upper()
    if name == 'WARN':
        return LogLevel.WARNING
    return LogLevel.__members__.get(name, LogLevel.INFO)


def _flag(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _load_env(environ: Optional[Dict[str, str]] = None) -> None:
    environ = os.environ if environ is None else environ
    for name, value in environ.items():
        if not name.startswith(_ENV_PREFIX):
            continue
        setting = name[len(_ENV_PREFIX):]
        if setting == 'LEVEL':
            _settings['level'] = parse_level(value)
        elif setting == 'STEPS':
            _settings['steps'] = _flag(value)
        elif setting == 'RECORDS':
            _settings['records'] = _flag(value)
        elif setting == 'DIR':
            _settings['log_dir'] = value
        else:
            _settings['modules'][setting.lower()] = parse_level(value)


_load_env()


def configure_logging(
    level: str = 'INFO',
    modules: Optional[Dict[str, str]] = None,
    steps: bool = False,
) -> None:
    """
    Set the global level, per-module levels and step tracing.

    Args:
        level: Level name for modules without an override
        modules: Module name -> level name; merged into existing overrides
        steps: Trace every executed operation (logged at DEBUG)
    """
    _settings['level'] = parse_level(level)
    for module, module_level in (modules or {}).items():
        _settings['modules'][module.lower()] = parse_level(module_level)
    _settings['steps'] = steps


def get_log_dir() -> Path:
    """Directory for record files: LOGICFLOW_LOG_DIR, else ./logs."""
    return Path(_settings['log_dir'] or 'logs').expanduser()


class FlowLogger:
    """Printing logger for one module."""

    def __init__(self, module: str):
        self.module = module

    @property
    def level(self) -> LogLevel:
        return _settings['modules'].get(self.module.lower(), _settings['level'])

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def _log(self, level: LogLevel, msg: str, args: tuple, label: Optional[str] = None) -> None:
        if not self.is_enabled_for(level):
            return
        if args:
            try:
                msg = msg % args
            except (TypeError, ValueError):
                msg = f"{msg} {args}"
        print(f"[{self.module}] {label or _LEVEL_NAMES[level]}: {msg}")

    def debug(self, msg: str, *args) -> None:
        self._log(LogLevel.DEBUG, msg, args)

    def info(self, msg: str, *args) -> None:
        self._log(LogLevel.INFO, msg, args)

    def warning(self, msg: str, *args) -> None:
        self._log(LogLevel.WARNING, msg, args)

    def error(self, msg: str, *args) -> None:
        self._log(LogLevel.ERROR, msg, args)

    def log_traceback(self, exc: BaseException) -> None:
        """Log an exception's traceback at ERROR, one line per entry."""
        text = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        for line in text.splitlines():
            if line.strip():
                self._log(LogLevel.ERROR, line, (), label='TRACE')

    def step(self, object_id: str, operation: Any) -> None:
        """Trace one executed operation (only with step tracing on)."""
        if _settings['steps']:
            self._log(LogLevel.DEBUG, "%s: %r", (object_id, operation), label='STEP')


@lru_cache(maxsize=64)
def get_logger(module: str) -> FlowLogger:
    """Shared logger for a module name ('compiler', 'runtime', ...)."""
    return FlowLogger(module)


# =============================================================================
# Lifecycle records
# =============================================================================

class RecordSink(ABC):
    """Destination for lifecycle records."""

    @abstractmethod
    def emit(self, record: Dict[str, Any]) -> None:
        ...

    def close(self) -> None:
        pass


class NullSink(RecordSink):
    """Drops every record."""

    def emit(self, record: Dict[str, Any]) -> None:
        pass


class JsonlSink(RecordSink):
    """
    Appends records to a JSON Lines file, one object per line.

    The file is opened on the first record, so a session that emits nothing
    leaves no file behind.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file = None

    def emit(self, record: Dict[str, Any]) -> None:
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open('a', encoding='utf-8')
        self._file.write(json.dumps(record) + '\n')

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


_sink: Optional[RecordSink] = None


def open_record_sink(path: Optional[Union[str, Path]] = None) -> RecordSink:
    """
    Sink for a session's records.

    Args:
        path: Explicit JSONL file. Without one, records go to
            ``<log dir>/records_<timestamp>.jsonl`` when LOGICFLOW_LOG_RECORDS
            is set, and are dropped otherwise.
    """
    if path is not None:
        return JsonlSink(path)
    if _settings['records']:
        return JsonlSink(get_log_dir() / f"records_{time.strftime('%Y%m%d_%H%M%S')}.jsonl")
    return NullSink()


def install_record_sink(sink: Optional[RecordSink]) -> None:
    """Route records to a sink, closing the one it replaces."""
    global _sink
    if _sink is not None and _sink is not sink:
        _sink.close()
    _sink = sink


def emit_record(module: str, record: Dict[str, Any]) -> bool:
    """
    Send a record to the installed sink.

    The sink receives the record with ``module`` and ``wall_time`` added.

    Returns:
        False if no sink is installed
    """
    if _sink is None:
        return False
    _sink.emit({'module': module, 'wall_time': time.time(), **record})
    return True


def close_record_sink() -> None:
    install_record_sink(None)
