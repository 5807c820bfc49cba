# relaydrop/infra/kv_store.py
#
# SET / GET / GET-AND-DELETE / DEL with per-key expiry, on one SQL table.
# Expired rows are invisible to every read; purge_expired() only reclaims space.

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite

from relaydrop.infra.database import db_session, init_db, make_engine, make_session_factory
from relaydrop.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)

entries = KVEntry.__table__


def utcnow() -> datetime:
    """Naive UTC, matching what the DateTime columns hold."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


SUPPORTED_DIALECTS = ("sqlite", "postgresql")


class KeyValueStore:
    def __init__(self, engine, clock: Callable[[], datetime] = utcnow):
        if engine.dialect.name not in SUPPORTED_DIALECTS:
            raise ValueError(
                f"unsupported database dialect {engine.dialect.name!r}, expected one of {SUPPORTED_DIALECTS}"
            )
        self.engine = engine
        self.clock = clock
        self._sessions = make_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, clock: Callable[[], datetime] = utcnow, **engine_kwargs):
        engine = make_engine(database_url, **engine_kwargs)
        init_db(engine)
        return cls(engine, clock=clock)

    @property
    def supports_atomic_take(self) -> bool:
        return bool(getattr(self.engine.dialect, "delete_returning", False))

    def set(self, key: str, value: str, ttl_seconds: int):
        """Unconditional write; replaces any existing value and its expiry."""
        if not isinstance(ttl_seconds, int) or isinstance(ttl_seconds, bool) or ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be a positive integer, got {ttl_seconds!r}")

        now = self.clock()
        row = {"key": key, "value": value, "expires_at": now + timedelta(seconds=ttl_seconds), "created_at": now}

        with db_session(self._sessions) as db:
            db.execute(self._upsert(row))

    def _upsert(self, row: dict):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(entries).values(**row)
        else:
            stmt = sqlite.insert(entries).values(**row)
        return stmt.on_conflict_do_update(
            index_elements=[entries.c.key],
            set_={
                "value": stmt.excluded.value,
                "expires_at": stmt.excluded.expires_at,
                "created_at": stmt.excluded.created_at,
            },
        )

    def get(self, key: str) -> str | None:
        stmt = select(entries.c.value).where(entries.c.key == key, entries.c.expires_at > self.clock())
        with db_session(self._sessions) as db:
            return db.execute(stmt).scalar_one_or_none()

    def get_and_delete(self, key: str) -> str | None:
        """
        Read and remove a live value in one DELETE ... RETURNING statement.

        Two concurrent callers can never both see the value: the row lock
        (PostgreSQL) or the database write lock (SQLite) lets exactly one
        DELETE match it.
        """
        if not self.supports_atomic_take:
            raise NotImplementedError(f"{self.engine.dialect.name} has no DELETE ... RETURNING")

        stmt = (
            delete(entries)
            .where(entries.c.key == key, entries.c.expires_at > self.clock())
            .returning(entries.c.value)
        )
        with db_session(self._sessions) as db:
            return db.execute(stmt).scalar_one_or_none()

    def delete(self, key: str) -> bool:
        with db_session(self._sessions) as db:
            result = db.execute(delete(entries).where(entries.c.key == key))
            return result.rowcount > 0

    def purge_expired(self) -> int:
        with db_session(self._sessions) as db:
            result = db.execute(delete(entries).where(entries.c.expires_at <= self.clock()))
            purged = result.rowcount
        if purged:
            logger.info("Purged %d expired entries", purged)
        return purged
