# This project was developed with assistance from AI tools.
"""Error envelope returned by every non-2xx response."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """``{"error": ..., "message": ...}``; ``message`` is dropped when None."""

    error: str = Field(description="Short fixed description, e.g. 'App not found'.")
    message: str | None = Field(
        default=None,
        description="Exception detail. Only populated in development mode.",
    )

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)
