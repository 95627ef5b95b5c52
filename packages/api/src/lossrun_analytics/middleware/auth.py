# This project was developed with assistance from AI tools.
"""
Request identity pass-through.

Authentication happens upstream (API gateway / auth proxy). This module only
reads the identity the gateway forwards so handlers can log who asked; it
never validates credentials and never rejects a request.
"""

import logging

from fastapi import Request

from ..schemas.auth import RequestContext

logger = logging.getLogger(__name__)

USER_HEADER = "X-Authenticated-User"
REQUEST_ID_HEADER = "X-Request-ID"


def get_request_context(request: Request) -> RequestContext:
    """Build the RequestContext forwarded by the upstream auth layer."""
    context = RequestContext(
        username=request.headers.get(USER_HEADER) or None,
        request_id=request.headers.get(REQUEST_ID_HEADER) or None,
    )
    logger.debug(
        "%s %s (user=%s, request_id=%s)",
        request.method,
        request.url.path,
        context.username,
        context.request_id,
    )
    return context
