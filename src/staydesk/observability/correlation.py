"""Request correlation IDs for log tracing."""

import uuid
from contextvars import ContextVar, Token

# Visible to every log call made while handling the request, sync or async.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Request-ID"

_MAX_INBOUND_LENGTH = 128


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def resolve_correlation_id(inbound: str | None) -> str:
    """Reuse the caller's request id when sane, otherwise mint one."""
    if inbound and len(inbound) <= _MAX_INBOUND_LENGTH and inbound.isprintable():
        return inbound
    return generate_correlation_id()


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    correlation_id_var.reset(token)
