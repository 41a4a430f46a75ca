# Copyright 2025 Google LLC
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
"""Structured logging for the studio: UI clicks, workflow events and model calls."""

import functools
import json
import logging
import os
import time
from contextlib import contextmanager

import mesop as me
from google.cloud import logging as cloud_logging

from state.state import AppState


class JsonFormatter(logging.Formatter):
    """One JSON object per record, merging any `extra_data` fields."""

    def format(self, record):
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "extra_data", {}))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _make_handler() -> logging.Handler:
    # Cloud Run sets K_SERVICE; there the Cloud Logging handler turns the
    # extra fields into structured entries.
    if os.environ.get("K_SERVICE"):
        return cloud_logging.Client().get_default_handler()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    return handler


def get_logger(name: str) -> logging.Logger:
    """Returns the named logger, attaching the studio handler once."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        logger.addHandler(_make_handler())
    return logger


analytics_logger = get_logger("studio.analytics")


def _current_context() -> tuple[str, str]:
    """Returns (page_name, session_id) of the active Mesop request, if any."""
    try:
        state = me.state(AppState)
        return state.current_page, state.session_id
    except Exception:
        # No Mesop request context, e.g. in tests or worker threads.
        return "unknown", "unknown"


def _emit(event_type: str, message: str, page_name=None, session_id=None, **fields):
    if page_name is None:
        page_name, context_session = _current_context()
        session_id = session_id or context_session
    extra_data = {
        "event_type": event_type,
        "page_name": page_name,
        "session_id": session_id,
        **fields,
    }
    analytics_logger.info(message, extra={"extra_data": extra_data})


def log_ui_click(element_id: str, page_name: str, session_id: str = None, extras: dict = None):
    _emit(
        "ui_click",
        f"UI Click: {element_id} on {page_name}",
        page_name=page_name,
        session_id=session_id,
        element_id=element_id,
        **(extras or {}),
    )


def log_workflow_event(event: str, details: dict = None):
    """Step changes, resets and other session transitions."""
    _emit("workflow", f"Workflow: {event}", event=event, details=details or {})


def log_model_call(model_name: str, status: str, duration_ms: float = 0, details: dict = None):
    _emit(
        "model_call",
        f"Model Call: {model_name} ({status})",
        model_name=model_name,
        status=status,
        duration_ms=round(duration_ms, 2),
        details=details or {},
    )


def track_click(element_id: str):
    """Decorates an event handler so every invocation is logged as a click."""

    def decorator(handler):
        @functools.wraps(handler)
        def wrapper(*args, **kwargs):
            page_name, session_id = _current_context()
            log_ui_click(element_id=element_id, page_name=page_name, session_id=session_id)
            return handler(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def track_model_call(model_name: str, **details):
    """Logs the duration of the wrapped model call and whether it raised."""
    started = time.monotonic()
    status = "failure"
    try:
        yield
        status = "success"
    except Exception as e:
        details = {"error": str(e), **details}
        raise
    finally:
        log_model_call(
            model_name,
            status=status,
            duration_ms=(time.monotonic() - started) * 1000,
            details=details,
        )
