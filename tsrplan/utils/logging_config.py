# Copyright 2025-2026 Dimensional Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Structured logging for planners and the façade.

Planners log with key-value context, often joint configurations and
tolerances. The console renderer prints those compactly (arrays rounded to
a few decimals); the JSON-lines file keeps them as lists.
"""

from collections.abc import Mapping
from datetime import datetime
import inspect
import logging
import logging.handlers
import os
from pathlib import Path
import sys
import tempfile
from typing import Any

import numpy as np
import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder

from tsrplan.constants import TSRPLAN_LOG_DIR, TSRPLAN_PROJECT_ROOT

_LOG_FILE_PATH: Path | None = None

_CONSOLE_PATH_WIDTH = 30
_CONSOLE_PRECISION = 4
_DROPPED_KEYS = ("func_name", "lineno", "exception", "exc_info", "_record", "_from_structlog")


def _get_log_directory() -> Path:
    # Explicit override, then the source checkout, then XDG state
    if os.getenv("TSRPLAN_LOG_DIR") or (TSRPLAN_PROJECT_ROOT / ".git").exists():
        log_dir = TSRPLAN_LOG_DIR
    else:
        state_home = os.getenv("XDG_STATE_HOME")
        base = Path(state_home) if state_home else Path.home() / ".local" / "state"
        log_dir = base / "tsrplan" / "logs"

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_dir = Path(tempfile.gettempdir()) / "tsrplan" / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

    return log_dir


def _file_logging_enabled() -> bool:
    return os.getenv("TSRPLAN_LOG_TO_FILE", "1").lower() not in ("0", "false", "no")


def _numpy_to_builtin(logger: Any, method_name: str, event_dict: Any) -> Any:
    """Make numpy values JSON-serializable for the file renderer."""
    for key, value in event_dict.items():
        if isinstance(value, np.ndarray):
            event_dict[key] = value.tolist()
        elif isinstance(value, np.generic):
            event_dict[key] = value.item()
    return event_dict


def _configure_structlog() -> Path | None:
    global _LOG_FILE_PATH

    if structlog.is_configured():
        return _LOG_FILE_PATH

    if _file_logging_enabled():
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _LOG_FILE_PATH = _get_log_directory() / f"tsrplan_{stamp}_{os.getpid()}.jsonl"

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            CallsiteParameterAdder(
                parameters=[CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO]
            ),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return _LOG_FILE_PATH


def _format_value(value: Any) -> str:
    if isinstance(value, np.ndarray):
        return np.array2string(value, precision=_CONSOLE_PRECISION, separator=",")
    if isinstance(value, (float, np.floating)):
        return f"{float(value):.{_CONSOLE_PRECISION}g}"
    return str(value)


def _time_of(timestamp: str) -> str:
    try:
        dt = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return str(timestamp)[:12]
    return dt.strftime("%H:%M:%S") + f".{dt.microsecond // 1000:03d}"


def _compact_console_processor(logger: Any, method_name: str, event_dict: Mapping[str, Any]) -> str:
    """Format log lines as: HH:MM:SS.mmm [lvl][module.py          ] Event key=value ..."""
    fields = {k: v for k, v in event_dict.items() if k not in _DROPPED_KEYS}

    timestamp = fields.pop("timestamp", None)
    time_str = _time_of(timestamp) if timestamp else _time_of(datetime.now().isoformat())
    level = str(fields.pop("level", "???"))[:3].lower()

    # Fixed width, truncated from the left
    source = str(fields.pop("logger", ""))[-_CONSOLE_PATH_WIDTH:]
    event = fields.pop("event", "")

    line = f"{time_str} [{level}][{source:<{_CONSOLE_PATH_WIDTH}s}] {event}"
    if fields:
        line += " " + " ".join(f"{k}={_format_value(v)}" for k, v in sorted(fields.items()))
    return line


def _logger_name(filename: str) -> str:
    try:
        return str(Path(filename).relative_to(TSRPLAN_PROJECT_ROOT))
    except ValueError:
        return filename


def setup_logger(*, level: int | None = None) -> Any:
    """Set up a structured logger for the calling module.

    The logger is named after the caller's path relative to the project
    root. Console output is compact key=value text. Unless
    ``TSRPLAN_LOG_TO_FILE=0``, a rotating handler also writes JSON lines to
    the log directory.

    Args:
        level: The logging level. Defaults to ``TSRPLAN_LOG_LEVEL`` or INFO.

    Returns:
        A configured structlog logger instance.
    """
    name = _logger_name(inspect.stack()[1].filename)
    log_file_path = _configure_structlog()

    if level is None:
        level = getattr(logging, os.getenv("TSRPLAN_LOG_LEVEL", "INFO").upper())

    stdlib_logger = logging.getLogger(name)
    stdlib_logger.handlers.clear()
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=_compact_console_processor)
    )
    stdlib_logger.addHandler(console_handler)

    if log_file_path is not None:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            mode="a",
            maxBytes=10 * 1024 * 1024,  # 10MiB
            backupCount=20,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _numpy_to_builtin,
                    structlog.processors.JSONRenderer(),
                ]
            )
        )
        stdlib_logger.addHandler(file_handler)

    for handler in stdlib_logger.handlers:
        handler.setLevel(level)

    return structlog.get_logger(name)
