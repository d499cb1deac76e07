"""
PostgreSQL repository adapter - Implements RegistryStore protocol.

This module provides the PostgreSQL implementation of the domain's
store port using psycopg3 with raw SQL.

Transaction Design - One Operation, One Transaction:
---------------------------------------------------
Every domain operation runs inside atomic(), which binds a single pooled
connection to the current thread for the duration of the block:

1. **conn.transaction()**: All writes in the block commit together, or
   roll back together when the block raises (including failures raised
   by nested collaborators such as pricing or treasury).

2. **pg_advisory_xact_lock()**: Taken first thing in the transaction, so
   operations execute one at a time in a total order. Released
   automatically at commit/rollback.

3. **INSERT ... ON CONFLICT DO NOTHING**: Domain records are inserted
   conditionally, so exactly one concurrent registration of a name can
   ever succeed, independently of the advisory lock.

Reads outside atomic() use a short-lived pooled connection.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from psycopg import Connection, Cursor
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from src.domain.models import Commitment, ContentRecord, DomainRecord
from src.domain.ports import ContentScope

logger = logging.getLogger(__name__)

# Arbitrary application-wide key for the operation-serializing advisory lock.
_REGISTRY_LOCK_KEY = 0x564E45


class PostgresRegistryStore:
    """
    Implements RegistryStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool
        self._local = threading.local()

    @property
    def _conn(self) -> Connection | None:
        return getattr(self._local, "conn", None)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._conn is not None:
            yield
            return

        with self._pool.connection() as conn, conn.transaction():
            conn.execute("SELECT pg_advisory_xact_lock(%s)", (_REGISTRY_LOCK_KEY,))
            self._local.conn = conn
            try:
                yield
            finally:
                self._local.conn = None

    @contextmanager
    def _cursor(self) -> Iterator[Cursor]:
        if self._conn is not None:
            with self._conn.cursor() as cursor:
                yield cursor
        else:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                yield cursor

    # Commitments

    def get_commitment(self, commit_hash: str) -> Commitment | None:
        sql = "SELECT commit_hash, submitted_at FROM commitments WHERE commit_hash = %s"
        with self._cursor() as cursor:
            cursor.execute(sql, (commit_hash,))
            row = cursor.fetchone()
        if row is None:
            return None
        return Commitment(commit_hash=row[0], submitted_at=row[1])

    def put_commitment(self, commitment: Commitment) -> None:
        sql = """
            INSERT INTO commitments (commit_hash, submitted_at)
            VALUES (%s, %s)
            ON CONFLICT (commit_hash) DO UPDATE
            SET submitted_at = EXCLUDED.submitted_at
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (commitment.commit_hash, commitment.submitted_at))

    def delete_commitments_before(self, cutoff: int) -> int:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM commitments WHERE submitted_at < %s", (cutoff,))
            return cursor.rowcount

    # Domains

    def get_domain(self, domain_name: str) -> DomainRecord | None:
        # Lock the row when called inside an operation
        sql = """
            SELECT domain_name, domain_owner, duration, secret, resolver, expiry_time, subdomain
            FROM domains
            WHERE domain_name = %s
        """
        if self._conn is not None:
            sql += " FOR UPDATE"

        with self._cursor() as cursor:
            cursor.execute(sql, (domain_name,))
            row = cursor.fetchone()
        if row is None:
            return None
        return DomainRecord(
            domain_name=row[0],
            domain_owner=row[1],
            duration=row[2],
            secret=bytes(row[3]),
            resolver=row[4],
            expiry_time=row[5],
            subdomain=row[6],
        )

    def insert_domain(self, record: DomainRecord) -> bool:
        """
        Conditionally insert a domain record.

        Returns:
            True if the row was inserted, False if the name already exists
        """
        sql = """
            INSERT INTO domains (domain_name, domain_owner, duration, secret, resolver, expiry_time, subdomain)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (domain_name) DO NOTHING
        """
        with self._cursor() as cursor:
            cursor.execute(
                sql,
                (
                    record.domain_name,
                    record.domain_owner,
                    record.duration,
                    record.secret,
                    record.resolver,
                    record.expiry_time,
                    record.subdomain,
                ),
            )
            return cursor.rowcount == 1

    def update_domain(self, record: DomainRecord) -> None:
        sql = """
            UPDATE domains
            SET domain_owner = %s, duration = %s, resolver = %s, expiry_time = %s, subdomain = %s
            WHERE domain_name = %s
        """
        with self._cursor() as cursor:
            cursor.execute(
                sql,
                (
                    record.domain_owner,
                    record.duration,
                    record.resolver,
                    record.expiry_time,
                    record.subdomain,
                    record.domain_name,
                ),
            )

    def delete_domain(self, domain_name: str) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM domains WHERE domain_name = %s", (domain_name,))

    # Content

    def get_content(self, scope: ContentScope, name: str) -> ContentRecord | None:
        sql = """
            SELECT entries, website, content_hash
            FROM content_records
            WHERE scope = %s AND name = %s
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (scope.value, name))
            row = cursor.fetchone()
        if row is None:
            return None
        return ContentRecord(entries=row[0], website=row[1], content_hash=row[2])

    def put_content(self, scope: ContentScope, name: str, content: ContentRecord) -> None:
        sql = """
            INSERT INTO content_records (scope, name, entries, website, content_hash)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (scope, name) DO UPDATE
            SET entries = EXCLUDED.entries,
                website = EXCLUDED.website,
                content_hash = EXCLUDED.content_hash
        """
        with self._cursor() as cursor:
            cursor.execute(
                sql, (scope.value, name, Jsonb(content.entries), content.website, content.content_hash)
            )

    def delete_content(self, scope: ContentScope, name: str) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                "DELETE FROM content_records WHERE scope = %s AND name = %s", (scope.value, name)
            )

    # Subdomain delegation

    def get_subdomain_manager(self, subdomain: str) -> str | None:
        with self._cursor() as cursor:
            cursor.execute("SELECT manager FROM subdomain_managers WHERE subdomain = %s", (subdomain,))
            row = cursor.fetchone()
        return None if row is None else row[0]

    def set_subdomain_manager(self, subdomain: str, manager: str) -> None:
        sql = """
            INSERT INTO subdomain_managers (subdomain, manager)
            VALUES (%s, %s)
            ON CONFLICT (subdomain) DO UPDATE SET manager = EXCLUDED.manager
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (subdomain, manager))

    def delete_subdomain_manager(self, subdomain: str) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM subdomain_managers WHERE subdomain = %s", (subdomain,))

    # Parameters

    def read_parameter(self, key: str) -> str | None:
        with self._cursor() as cursor:
            cursor.execute("SELECT value FROM registry_parameters WHERE key = %s", (key,))
            row = cursor.fetchone()
        return None if row is None else row[0]

    def write_parameter(self, key: str, value: str) -> None:
        sql = """
            INSERT INTO registry_parameters (key, value)
            VALUES (%s, %s)
            ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (key, value))

    def ping(self) -> None:
        """Health check - raises if the database is unreachable."""
        with self._pool.connection() as conn:
            conn.execute("SELECT 1")


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
