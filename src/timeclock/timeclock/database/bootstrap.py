"""Create the relay database and apply ``database/schema.sql``."""

from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def strip_database_statements(sql: str) -> str:
    """Drop ``CREATE DATABASE``/``USE`` lines; the target database comes from config."""
    return _USE_RE.sub("", _CREATE_DB_RE.sub("", sql))


def split_statements(sql: str) -> Iterator[str]:
    """Split a script on ``;``, ignoring ``--`` comments and semicolons inside quotes."""
    buf: list[str] = []
    quoted = False
    i = 0
    while i < len(sql):
        ch = sql[i]
        if not quoted and sql.startswith("--", i):
            newline = sql.find("\n", i)
            i = len(sql) if newline == -1 else newline + 1
            buf.append("\n")
            continue
        if ch == "'":
            quoted = not quoted
        if ch == ";" and not quoted:
            stmt = "".join(buf).strip()
            if stmt:
                yield stmt
            buf = []
        else:
            buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with closing(mysql.connector.connect(**target.connect_kwargs(with_database=False))) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    """Apply every statement of the schema file; returns how many ran."""
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    statements = list(split_statements(strip_database_statements(Path(schema_path).read_text(encoding="utf-8"))))
    with closing(mysql.connector.connect(**target.connect_kwargs())) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    logger.info("Applied %d schema statements to %s", len(statements), target.database)
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    with closing(mysql.connector.connect(**target.connect_kwargs())) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [str(row[0]) for row in cur.fetchall()]
