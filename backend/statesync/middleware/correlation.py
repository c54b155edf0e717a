"""Request correlation IDs.

Every response carries ``X-Request-ID``; a client-supplied value is echoed
back, otherwise a UUID4 is generated. The id is picked up by the structlog
chain (``statesync.core.logging.add_correlation_id``) and by the error
handlers that report a ``debug_id`` next to it.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI


def setup_correlation_middleware(app: FastAPI) -> None:
    """Install the X-Request-ID middleware on ``app``."""
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        generator=lambda: str(uuid.uuid4()),
        validator=None,  # Accept any format
        transformer=lambda a: a,
    )


def get_correlation_id() -> str | None:
    """Current request's correlation ID, or None outside a request."""
    try:
        return correlation_id.get()
    except LookupError:
        return None


__all__ = ["setup_correlation_middleware", "get_correlation_id"]
