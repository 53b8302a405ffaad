"""
Read access to the ``date_durations`` and ``duration_ratings`` views.
"""

from ..core.db import get_connection
from ..core.pagination import Page, PageRequest
from ..schemas.date_duration import DateDurationRead, DurationRatingRead


class DateDurationRepository:
    """Per-day duration summaries, filtered by owner login."""

    SORT_COLUMNS = {"id": "id", "local_date": "local_date", "total_duration": "total_duration"}

    def find_by_login(self, login: str, page_request: PageRequest) -> Page[DateDurationRead]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            total = cursor.execute(
                "SELECT COUNT(*) AS count FROM date_durations WHERE login = ?",
                (login,),
            ).fetchone()["count"]
            order = page_request.order_by(self.SORT_COLUMNS, default="local_date")
            rows = cursor.execute(
                "SELECT id, local_date, total_duration, login FROM date_durations "
                f"WHERE login = ? ORDER BY {order} LIMIT ? OFFSET ?",
                (login, page_request.size, page_request.offset),
            ).fetchall()
            summaries = [
                DateDurationRead(
                    id=row["id"],
                    local_date=row["local_date"],
                    total_duration=row["total_duration"],
                    login=row["login"],
                )
                for row in rows
            ]
            return Page(content=summaries, total=total, request=page_request)
        finally:
            conn.close()


class DurationRatingRepository:
    """Average rating per nap length bucket, filtered by owner login."""

    SORT_COLUMNS = {"id": "id", "duration": "duration", "average_rating": "average_rating"}

    def find_by_login(self, login: str, page_request: PageRequest) -> Page[DurationRatingRead]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            total = cursor.execute(
                "SELECT COUNT(*) AS count FROM duration_ratings WHERE login = ?",
                (login,),
            ).fetchone()["count"]
            order = page_request.order_by(self.SORT_COLUMNS, default="duration")
            rows = cursor.execute(
                "SELECT id, duration, average_rating, login FROM duration_ratings "
                f"WHERE login = ? ORDER BY {order} LIMIT ? OFFSET ?",
                (login, page_request.size, page_request.offset),
            ).fetchall()
            ratings = [
                DurationRatingRead(
                    id=row["id"],
                    duration=row["duration"],
                    average_rating=row["average_rating"],
                    login=row["login"],
                )
                for row in rows
            ]
            return Page(content=ratings, total=total, request=page_request)
        finally:
            conn.close()
