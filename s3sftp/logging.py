# Copyright 2025 s3sftp contributors
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

"""Structured logging configuration for s3sftp.

Adapter modules log through module-level ``structlog.get_logger(__name__)``
loggers; configuring output is the job of whatever process embeds them (an
SFTP server, the ``s3sftp`` CLI).

Environment Variables:
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO
    LOG_FORMAT: Output format (console, json, cloudwatch, auto). Default: auto
    LOG_FILE: Optional file path for log output. Default: None (stderr only)

Example:
    import structlog
    from s3sftp.logging import configure_structlog

    configure_structlog()
    logger = structlog.get_logger(__name__)
    logger.info("Session opened", remote_address="198.51.100.4:50022")
"""

import logging
import os
import sys
from typing import Any, List

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer

_HANDLER_NAME = "s3sftp"


def _cloudwatch_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Rename fields to the names CloudWatch Logs Insights dashboards expect.

    - 'event' becomes 'message'
    - 'timestamp' becomes '@timestamp'
    - 'level' is uppercased (INFO, ERROR)
    """
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")

    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")

    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()

    return event_dict


def get_log_level() -> int:
    """Get log level from the LOG_LEVEL environment variable."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def get_log_format() -> str:
    """Get log format from environment variable.

    Formats:
        - console: Colored output for development (default for TTY)
        - json: JSON output for production
        - cloudwatch: JSON with AWS CloudWatch field names
        - auto: console if TTY, json otherwise (default)

    Returns:
        Format string: 'console', 'json' or 'cloudwatch'
    """
    format_str = os.getenv("LOG_FORMAT", "auto").lower()
    if format_str == "auto":
        return "console" if sys.stderr.isatty() else "json"
    return format_str


def _get_renderer(log_format: str) -> Any:
    if log_format == "console":
        return ConsoleRenderer(colors=True)
    return JSONRenderer()


def install_root_handlers(log_file: str, log_level: int) -> List[logging.Handler]:
    """Attach stderr and rotating file handlers to the root logger.

    Handlers installed by an earlier call are closed and replaced, so
    configuring twice does not duplicate log lines.
    """
    from logging.handlers import RotatingFileHandler
    from pathlib import Path

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)
            existing.close()

    stderr_handler = logging.StreamHandler(sys.stderr)

    # 100MB max, 5 backups
    file_handler = RotatingFileHandler(log_file, maxBytes=100 * 1024 * 1024, backupCount=5)

    handlers: List[logging.Handler] = [stderr_handler, file_handler]
    for handler in handlers:
        handler.set_name(_HANDLER_NAME)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
    return handlers


def configure_structlog() -> None:
    """Configure structlog based on environment variables.

    Call once at process startup, before any loggers are used. Output goes
    to stderr, plus a rotating file when LOG_FILE is set.
    """
    log_level = get_log_level()
    log_format = get_log_format()
    log_file = os.getenv("LOG_FILE")

    shared_processors: List[Any] = [
        # Picks up session-scoped context (remote_address, user) bound by the server
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "cloudwatch":
        processors = shared_processors + [_cloudwatch_processor, JSONRenderer()]
    else:
        processors = shared_processors + [_get_renderer(log_format)]

    if log_file:
        install_root_handlers(log_file, log_level)

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            cache_logger_on_first_use=True,
        )
