"""
Persistence of naps in the ``naps`` table.

The repository stores whatever it is given.  Deciding who owns a nap
and who may touch it is the job of ``NapService``.
"""

import logging
import sqlite3
from typing import Optional

from ..core.db import get_connection
from ..core.errors import NotFoundError
from ..core.pagination import Page, PageRequest
from ..schemas.nap import NapRead, ResolvedNap


logger = logging.getLogger(__name__)

SELECT_NAP = (
    "SELECT n.id, n.start_time, n.end_time, n.rating, n.notes, u.login AS owner "
    "FROM naps n JOIN users u ON u.id = n.user_id"
)

SORT_COLUMNS = {
    "id": "n.id",
    "start_time": "julianday(n.start_time)",
    "end_time": "julianday(n.end_time)",
    "rating": "n.rating",
}


def _to_nap(row: sqlite3.Row) -> NapRead:
    return NapRead(
        id=row["id"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        rating=row["rating"],
        notes=row["notes"],
        owner=row["owner"],
    )


class NapRepository:
    """CRUD operations on naps."""

    def save(self, resolved: ResolvedNap) -> NapRead:
        """Insert the nap if it has no id, otherwise overwrite the stored row.

        Raises ``NotFoundError`` when updating an id that no longer exists.
        """
        nap = resolved.nap
        values = (
            resolved.owner_id,
            nap.start_time.isoformat(),
            nap.end_time.isoformat() if nap.end_time else None,
            nap.rating,
            nap.notes,
        )
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if nap.id is None:
                cursor.execute(
                    "INSERT INTO naps (user_id, start_time, end_time, rating, notes) "
                    "VALUES (?, ?, ?, ?, ?)",
                    values,
                )
                nap_id = cursor.lastrowid
            else:
                cursor.execute(
                    "UPDATE naps SET user_id = ?, start_time = ?, end_time = ?, rating = ?, notes = ?, "
                    "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    values + (nap.id,),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"Nap {nap.id} not found")
                nap_id = nap.id
            conn.commit()
            logger.debug("Saved nap %s for user id %s", nap_id, resolved.owner_id)
            row = cursor.execute(f"{SELECT_NAP} WHERE n.id = ?", (nap_id,)).fetchone()
            return _to_nap(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def find_by_id(self, nap_id: int) -> Optional[NapRead]:
        conn = get_connection()
        try:
            row = conn.execute(f"{SELECT_NAP} WHERE n.id = ?", (nap_id,)).fetchone()
            return _to_nap(row) if row else None
        finally:
            conn.close()

    def find_all(self, page_request: PageRequest) -> Page[NapRead]:
        """Return a page over every nap in the store."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            total = cursor.execute("SELECT COUNT(*) AS count FROM naps").fetchone()["count"]
            order = page_request.order_by(SORT_COLUMNS, default="n.id")
            rows = cursor.execute(
                f"{SELECT_NAP} ORDER BY {order} LIMIT ? OFFSET ?",
                (page_request.size, page_request.offset),
            ).fetchall()
            return Page(content=[_to_nap(row) for row in rows], total=total, request=page_request)
        finally:
            conn.close()

    def find_by_owner(self, login: str, page_request: PageRequest) -> Page[NapRead]:
        """Return a page over the naps owned by ``login``."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            total = cursor.execute(
                "SELECT COUNT(*) AS count FROM naps n JOIN users u ON u.id = n.user_id WHERE u.login = ?",
                (login,),
            ).fetchone()["count"]
            order = page_request.order_by(SORT_COLUMNS, default="n.id")
            rows = cursor.execute(
                f"{SELECT_NAP} WHERE u.login = ? ORDER BY {order} LIMIT ? OFFSET ?",
                (login, page_request.size, page_request.offset),
            ).fetchall()
            return Page(content=[_to_nap(row) for row in rows], total=total, request=page_request)
        finally:
            conn.close()

    def delete_by_id(self, nap_id: int) -> bool:
        """Delete the nap; returns False if there was nothing to delete."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM naps WHERE id = ?", (nap_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
