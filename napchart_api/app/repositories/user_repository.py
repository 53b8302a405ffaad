"""
User directory backed by the ``users`` and ``user_authorities`` tables.
"""

import sqlite3
from typing import Dict, List, Optional

from ..core.db import get_connection
from ..core.pagination import Page, PageRequest
from ..core.security import Role
from ..schemas.user import UserCreate, UserRead


SORT_COLUMNS = {"id": "id", "login": "login", "email": "email"}


class UserRepository:
    """Lookup and registration of users."""

    @staticmethod
    def _authorities(cursor: sqlite3.Cursor, user_ids: List[int]) -> Dict[int, List[Role]]:
        if not user_ids:
            return {}
        placeholders = ", ".join("?" for _ in user_ids)
        rows = cursor.execute(
            f"SELECT user_id, authority FROM user_authorities WHERE user_id IN ({placeholders}) "
            "ORDER BY authority",
            tuple(user_ids),
        ).fetchall()
        result: Dict[int, List[Role]] = {user_id: [] for user_id in user_ids}
        for row in rows:
            result[row["user_id"]].extend(Role.parse_many([row["authority"]]))
        return result

    @staticmethod
    def _to_user(row: sqlite3.Row, authorities: List[Role]) -> UserRead:
        return UserRead(
            id=row["id"],
            login=row["login"],
            email=row["email"],
            activated=bool(row["activated"]),
            authorities=authorities,
        )

    def find_by_login(self, login: str) -> Optional[UserRead]:
        """Return the user with ``login`` or ``None``."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, login, email, activated FROM users WHERE login = ?",
                (login,),
            ).fetchone()
            if not row:
                return None
            return self._to_user(row, self._authorities(cursor, [row["id"]])[row["id"]])
        finally:
            conn.close()

    def find_all(self, page_request: PageRequest) -> Page[UserRead]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            total = cursor.execute("SELECT COUNT(*) AS count FROM users").fetchone()["count"]
            order = page_request.order_by(SORT_COLUMNS, default="id")
            rows = cursor.execute(
                f"SELECT id, login, email, activated FROM users ORDER BY {order} LIMIT ? OFFSET ?",
                (page_request.size, page_request.offset),
            ).fetchall()
            authorities = self._authorities(cursor, [row["id"] for row in rows])
            users = [self._to_user(row, authorities[row["id"]]) for row in rows]
            return Page(content=users, total=total, request=page_request)
        finally:
            conn.close()

    def create(self, data: UserCreate) -> UserRead:
        """Insert a user and its authorities in one transaction.

        Raises ``sqlite3.IntegrityError`` if the login is already taken.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO users (login, email, activated) VALUES (?, ?, 1)",
                (data.login, data.email),
            )
            user_id = cursor.lastrowid
            authorities = sorted(set(data.authorities), key=lambda role: role.value)
            cursor.executemany(
                "INSERT INTO user_authorities (user_id, authority) VALUES (?, ?)",
                [(user_id, role.value) for role in authorities],
            )
            conn.commit()
            return UserRead(
                id=user_id,
                login=data.login,
                email=data.email,
                activated=True,
                authorities=authorities,
            )
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
