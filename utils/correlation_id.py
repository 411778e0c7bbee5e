from contextvars import ContextVar, Token
from typing import Optional
from uuid import uuid4

CORRELATION_HEADER = "X-Correlation-ID"

correlation_id_context: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def new_correlation_id() -> str:
    return uuid4().hex


def current_correlation_id() -> Optional[str]:
    return correlation_id_context.get()


def bind_correlation_id(correlation_id: str) -> Token:
    """Attach an id to the running request; pass the token to reset_correlation_id."""
    return correlation_id_context.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    correlation_id_context.reset(token)
