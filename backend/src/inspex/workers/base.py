"""Base class for background tasks.

Tasks are enqueued with the request id of the HTTP request that caused them
so worker log lines can be correlated with it.

Task Signature Pattern:
    @shared_task(base=BaseTask)
    def my_task(payload: dict, request_id: str = None) -> dict:
        ...

    my_task.delay(payload=..., request_id=current_request_id())
"""

from celery import Task

from ..observability.request_id import generate_request_id, reset_request_id, set_request_id


class BaseTask(Task):
    """Bind ``request_id`` (or a fresh one) to the log context while running."""

    def __call__(self, *args, **kwargs):
        token = set_request_id(kwargs.get("request_id") or generate_request_id())
        try:
            return super().__call__(*args, **kwargs)
        finally:
            reset_request_id(token)
