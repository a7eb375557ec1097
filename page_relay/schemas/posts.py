"""Schemas related to queuing page posts with the automation workflow."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QueuePostRequest(BaseModel):
    """Payload the front-end sends to have a message published on a page.

    Every field is optional at the schema level so that incomplete requests
    reach the route and get the documented 400 instead of a validation 422.
    The route also falls back to an empty request when the body does not fit
    this shape at all.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    user_id: Optional[str] = Field(None, alias="userId")
    page_id: Optional[str] = Field(None, alias="pageId")
    message: Optional[str] = None

    def missing_fields(self) -> list[str]:
        """Return the wire names of required fields that are absent or empty."""
        values = {
            "userId": self.user_id,
            "pageId": self.page_id,
            "message": self.message,
        }
        return [name for name, value in values.items() if not value]


__all__ = ["QueuePostRequest"]
