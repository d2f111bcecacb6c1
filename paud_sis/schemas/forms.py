"""Form-submission result shared by every write endpoint."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field


class FormState(BaseModel):
    """Outcome of a form submission.

    Errors are returned as values so that the form can be redisplayed with the
    message attached. Delete actions have no form to return to, so their
    failures carry both the message and an error redirect.

    Attributes:
        error: Human-readable validation or storage message.
        redirect_url: Where the browser goes after a successful write.
        invalidate_tags: Cache tags made stale by the write. They are dropped
            only once the request transaction has committed.
    """

    error: str | None = Field(default=None, description="Message to show on the form")
    redirect_url: str | None = Field(
        default=None, description="Redirect target after a successful write"
    )
    invalidate_tags: tuple[str, ...] = Field(
        default=(), description="Cache tags to invalidate after commit"
    )

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> FormState:
        return cls(error=message)

    @classmethod
    def success(cls, redirect_url: str, invalidate_tags: Iterable[str] = ()) -> FormState:
        return cls(redirect_url=redirect_url, invalidate_tags=tuple(invalidate_tags))
