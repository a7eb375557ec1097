"""Schemas for the Facebook data exposed to the front-end."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FacebookProfile(BaseModel):
    """Identity of the user who granted the token."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., description="App-scoped Facebook user id.")
    name: Optional[str] = None


class ManagedPage(BaseModel):
    """A page the user administers. Every other Graph field is dropped."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: Optional[str] = None


class PageListResponse(BaseModel):
    data: list[ManagedPage]


__all__ = ["FacebookProfile", "ManagedPage", "PageListResponse"]
