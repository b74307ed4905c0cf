from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .repository import SequenceRepository


class MySQLSequenceRepository(SequenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def next_value(self, name: str) -> int:
        # LAST_INSERT_ID(expr) is connection-scoped, so the read below sees
        # exactly the value this statement wrote under the row lock.
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            cur.execute(
                """
                INSERT INTO sequence_counters(name, current_value)
                VALUES(%s, LAST_INSERT_ID(1))
                ON DUPLICATE KEY UPDATE current_value = LAST_INSERT_ID(current_value + 1)
                """,
                (name,),
            )
            cur.execute("SELECT LAST_INSERT_ID()")
            row = cur.fetchone()
            return int(row[0])
