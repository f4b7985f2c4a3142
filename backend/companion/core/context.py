"""Per-request context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
action_ctx_var: ContextVar[str | None] = ContextVar("action", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_action() -> str | None:
    """Return the name of the orchestrated action currently running."""
    return action_ctx_var.get()


@contextmanager
def action_scope(name: str) -> Iterator[None]:
    """Tag log records emitted inside the block with an action name."""
    token = action_ctx_var.set(name)
    try:
        yield
    finally:
        action_ctx_var.reset(token)
