"""Schedule response schemas."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class UpcomingCollection(BaseModel):
    id: int
    bin_type: str
    next_collection_date: date
    days_until: int = Field(ge=0)
    body_color: str
    head_color: str
