from contextvars import ContextVar
from typing import Optional

from structlog.contextvars import bind_contextvars

# Learning-session scope, bound per request / per pipeline run
session_id_ctx: ContextVar[Optional[str]] = ContextVar("session_id", default=None)
run_id_ctx: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def get_session_id() -> Optional[str]:
    return session_id_ctx.get()


def get_run_id() -> Optional[str]:
    return run_id_ctx.get()


def set_session_id(session_id: Optional[str]):
    return session_id_ctx.set(session_id)


def set_run_id(run_id: Optional[str]):
    return run_id_ctx.set(run_id)


def bind_context(**kwargs):
    """
    Binds the provided key-value pairs to the current structlog context.
    """
    bind_contextvars(**kwargs)
