"""
Pydantic schemas for the catalog data served by the booking backend.

The backend speaks camelCase JSON; these models accept it through aliases
and expose snake_case attributes.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class BackendModel(BaseModel):
    """Base for payloads exchanged with the booking backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Movie(BackendModel):
    """A movie from the catalog. Immutable once fetched."""

    movie_id: int
    title: str
    genre: str = ""
    duration_min: int = 0
    rating: str = ""
    release_date: Optional[date] = None
    cover_image_url: Optional[str] = None
    description: Optional[str] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v):
        """Accept full timestamps as well as plain dates."""
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v or None

    def matches(self, term: str) -> bool:
        """Case-insensitive match on title or genre."""
        needle = term.strip().lower()
        return needle in self.title.lower() or needle in self.genre.lower()


class Showtime(BackendModel):
    """A scheduled screening of a movie at one theater screen."""

    showtime_id: int
    movie_id: int
    theater_id: int
    screen_number: int
    show_date_time: datetime
    base_price: Decimal = Field(..., ge=0)

    @field_validator("base_price", mode="before")
    @classmethod
    def parse_price(cls, v):
        """Convert JSON floats through their shortest repr to avoid binary drift."""
        if isinstance(v, float):
            return Decimal(repr(v))
        return v

    @property
    def screen_key(self) -> tuple[int, int]:
        """The (theater, screen) pair whose seats this showtime uses."""
        return (self.theater_id, self.screen_number)


class BackendSeat(BackendModel):
    """A physical seat as listed by the backend."""

    seat_id: int
    theater_id: int
    screen_number: int
    seat_number: int
    seat_type: str = "standard"

    @property
    def screen_key(self) -> tuple[int, int]:
        return (self.theater_id, self.screen_number)


class MovieForm(BackendModel):
    """Fixed schema for creating or updating a catalog movie."""

    title: str = Field(..., min_length=1, max_length=255)
    genre: str = Field(..., min_length=1, max_length=100)
    duration_min: int = Field(..., gt=0, le=600, description="Running time in minutes")
    rating: str = Field(..., min_length=1, max_length=10)
    release_date: date
    cover_image_url: Optional[str] = Field(None, max_length=2048)
    description: Optional[str] = None
