"""
Type definitions and Pydantic models for the Ghost Digest Pipeline.
"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PeriodKind = Literal["daily", "weekly"]


class Tag(BaseModel):
    """A Ghost tag reference."""
    model_config = ConfigDict(extra="ignore")

    name: str


class Post(BaseModel):
    """Represents a post returned by the Ghost Admin API."""
    # Ghost returns many more fields than the digest needs
    model_config = ConfigDict(extra="ignore")

    title: str
    url: str
    tags: Optional[List[Tag]] = None
    published_at: Optional[datetime] = None
    feature_image: Optional[str] = None
    html: Optional[str] = None
    excerpt: Optional[str] = None

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags or []]


class DigestWindow(BaseModel):
    """Half-open interval [start, end) of local days covered by a digest."""
    model_config = ConfigDict(frozen=True)

    period: PeriodKind
    anchor: date
    start: datetime = Field(..., description="Inclusive, midnight in the digest timezone")
    end: datetime = Field(..., description="Exclusive, midnight in the digest timezone")

    @model_validator(mode="after")
    def _check_bounds(self) -> "DigestWindow":
        if self.end <= self.start:
            raise ValueError("Window end must be after its start")
        return self

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains(self, day: date) -> bool:
        """Return True when ``day`` falls inside the window."""
        return self.start_date <= day < self.end_date
