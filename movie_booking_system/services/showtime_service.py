"""
Showtime selection helpers.
"""

from typing import Iterable, Optional, Sequence, Tuple

from ..schemas.catalog import Showtime


def filter_by_movie(showtimes: Iterable[Showtime], movie_id: int) -> Tuple[Showtime, ...]:
    """Showtimes of one movie, in backend order."""
    return tuple(showtime for showtime in showtimes if showtime.movie_id == movie_id)


def select_default(filtered: Sequence[Showtime]) -> Optional[Showtime]:
    """The showtime to activate when a movie is chosen: the first one, if any."""
    return filtered[0] if filtered else None


def find_showtime(showtimes: Iterable[Showtime], showtime_id: int) -> Optional[Showtime]:
    return next((s for s in showtimes if s.showtime_id == showtime_id), None)


def format_showtime(showtime: Showtime, fmt: str = "%Y-%m-%d %H:%M") -> str:
    """Human-readable start time."""
    return showtime.show_date_time.strftime(fmt)
