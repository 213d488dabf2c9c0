"""Request ID management for request correlation.

The request ID lives in a context variable so it follows the request
through sync endpoints, async middleware and log records. Celery tasks
receive it as an argument and re-bind it on the worker.
"""

import uuid
from contextvars import ContextVar, Token
from typing import Optional

# Context variable for request_id (async-safe)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def current_request_id() -> Optional[str]:
    """Current request ID, or None outside a request (for task payloads)."""
    return request_id_var.get()


def set_request_id(request_id: str) -> Token:
    """Bind a request ID to the current context.

    Returns:
        Token: Pass to reset_request_id() to restore the previous value
    """
    return request_id_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_var.reset(token)
