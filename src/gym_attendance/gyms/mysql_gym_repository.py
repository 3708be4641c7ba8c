from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Gym
from .repository import GymRepository


class MySQLGymRepository(GymRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Gym]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM gyms ORDER BY name ASC")
            return [Gym(gym_id=str(r["id"]), name=r["name"]) for r in fetchall(cur)]
