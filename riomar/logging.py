# Copyright 2025 John Brosnihan
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
"""
Structured logging for the trophy service.

Events are snake_case names with keyword fields, e.g.

    logger.info("increment_trophies_success", user_id="u1", delta=3, trophies=7)

In dev they are rendered for the console; in staging and prod as one JSON
object per line, with 'message' and 'severity' keys that Cloud Logging picks
up. Request-scoped fields (request_id, path, method and, after
authentication, user_id) are bound through structlog.contextvars and merged
into every event without overriding fields passed explicitly.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from riomar.config import get_settings

_CLOUD_SEVERITY = {
    "debug": "DEBUG",
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
}


def add_service_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", settings.service_name)
    event_dict.setdefault("environment", settings.service_environment)
    return event_dict


def to_cloud_logging(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Move 'event' to 'message' and add a Cloud Logging 'severity'."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    level = event_dict.get("level", method_name)
    event_dict["severity"] = _CLOUD_SEVERITY.get(level, "DEFAULT")
    return event_dict


def configure_logging() -> None:
    """Set up stdlib logging and structlog. Called once when the app module loads."""
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_fields,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.ExceptionRenderer(),
    ]
    if settings.service_environment == "dev":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [to_cloud_logging, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_context(request_id: str, path: str, method: str) -> None:
    """Replace any previous request fields with those of the new request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id, path=path, method=method
    )


def bind_user_context(user_id: str) -> None:
    """Tag the rest of the request's events with the authenticated caller."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
