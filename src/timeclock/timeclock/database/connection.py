from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import mysql.connector

UTC_OFFSET = "+00:00"


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "timeclock_db"

    @classmethod
    def from_dict(cls, raw: Optional[dict]) -> "DBConfig":
        raw = raw or {}
        defaults = cls()
        return cls(
            host=str(raw.get("host") or defaults.host),
            port=int(raw.get("port") or defaults.port),
            user=str(raw.get("user") or defaults.user),
            password=str(raw.get("password") or ""),
            database=str(raw.get("database") or defaults.database),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "use_pure": True,
        }
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Connection factory for the relay tables, one shared instance per config.

    A connection is opened per repository call. Sessions run in UTC because
    client timestamps are stored as naive UTC datetimes.
    """

    _instances: dict[DBConfig, "DatabaseConnection"] = {}

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if config not in cls._instances:
            cls._instances[config] = cls(config)
        return cls._instances[config]

    def connect(self):
        conn = mysql.connector.connect(**self._config.connect_kwargs())
        conn.time_zone = UTC_OFFSET
        return conn
