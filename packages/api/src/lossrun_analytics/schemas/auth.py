# This project was developed with assistance from AI tools.
"""Request identity forwarded by the upstream auth layer."""

from pydantic import BaseModel


class RequestContext(BaseModel):
    """Already-authenticated caller, as asserted by the gateway.

    ``username`` is None when the gateway forwarded no identity (local dev).
    """

    username: str | None = None
    request_id: str | None = None
