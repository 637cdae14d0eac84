"""SQLite record store for monitored VPS accounts"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from vps_monitor.config import config
from vps_monitor.models.account import AccountUpdate, CookieStatus, MonitoredAccount
from vps_monitor.models.scrape_outcome import ScrapeSuccessUpdate

logger = logging.getLogger(__name__)


class AccountNotFoundError(LookupError):
    """Raised when an account id does not exist in the store"""

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"VPS {account_id} not found")


class StoreError(Exception):
    """Raised when the underlying database operation fails"""

    pass


def merge_scrape_success(
    account: MonitoredAccount, update: ScrapeSuccessUpdate
) -> MonitoredAccount:
    """
    Apply a successful scrape to an account

    valid_until, ip, cookie_status and update_time are always overwritten.
    location and creation_date keep their previous value when the scrape did
    not produce one, so a transient miss never erases a known good value.
    """
    return account.model_copy(
        update={
            "valid_until": update.valid_until,
            "ip": update.ip,
            "location": update.location if update.location is not None else account.location,
            "creation_date": (
                update.creation_date
                if update.creation_date is not None
                else account.creation_date
            ),
            "cookie_status": CookieStatus.NORMAL,
            "update_time": update.observed_at,
        }
    )


def _to_db(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class AccountStore:
    """SQLite-based store for VPS accounts"""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or config.db_path
        # :memory: databases vanish with their connection, so keep one open
        self._memory_conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """
        Create and configure a database connection

        For :memory: databases, returns the persistent connection.
        For file databases, creates a new connection.
        """
        if self.db_path == ":memory:":
            if self._memory_conn is None:
                # Shared between the API event loop and the scheduler thread
                self._memory_conn = sqlite3.connect(self.db_path, check_same_thread=False)
                self._memory_conn.row_factory = sqlite3.Row
            return self._memory_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, commit on success and wrap sqlite errors"""
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            logger.error(f"Could not open database {self.db_path}: {e}")
            raise StoreError(f"Could not open database: {e}") from e

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database operation failed on {self.db_path}: {e}")
            raise StoreError(f"Database operation failed: {e}") from e
        finally:
            if self.db_path != ":memory:":
                conn.close()

    async def initialize(self) -> None:
        """Create the database file and schema if needed"""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            if self.db_path != ":memory:":
                conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS vps (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    ops TEXT NOT NULL,
                    cookie TEXT NOT NULL,
                    valid_until TEXT,
                    ip TEXT,
                    location TEXT,
                    creation_date TEXT,
                    cookie_status TEXT DEFAULT 'Normal',
                    update_time TEXT
                )
            """)
        logger.info(f"Account store initialized at {self.db_path}")

    def close(self) -> None:
        if self._memory_conn is not None:
            self._memory_conn.close()
            self._memory_conn = None

    @staticmethod
    def _row_to_account(row: sqlite3.Row) -> MonitoredAccount:
        return MonitoredAccount(
            id=row["id"],
            name=row["name"],
            ops=row["ops"],
            cookie=row["cookie"],
            valid_until=row["valid_until"],
            ip=row["ip"],
            location=row["location"],
            creation_date=row["creation_date"],
            cookie_status=row["cookie_status"] or CookieStatus.NORMAL,
            update_time=row["update_time"],
        )

    async def get_all(self) -> list[MonitoredAccount]:
        """All accounts, newest first"""
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM vps ORDER BY id DESC").fetchall()
        return [self._row_to_account(row) for row in rows]

    async def get_by_id(self, account_id: int) -> MonitoredAccount | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM vps WHERE id = ?", (account_id,)).fetchone()
        return self._row_to_account(row) if row else None

    async def create(self, name: str, ops: str, cookie: str) -> int:
        """Insert a new account with NORMAL status and return its id"""
        with self._connection() as conn:
            cursor = conn.execute(
                "INSERT INTO vps (name, ops, cookie, cookie_status) VALUES (?, ?, ?, ?)",
                (name, ops, cookie, CookieStatus.NORMAL.value),
            )
            account_id = cursor.lastrowid
        logger.info(f"Created VPS {account_id} ({name})")
        return account_id

    async def update(self, account_id: int, data: AccountUpdate) -> None:
        """Update only the fields present in data; no-op when none are"""
        fields = data.model_dump(exclude_none=True)
        if not fields:
            return

        assignments = ", ".join(f"{column} = ?" for column in fields)
        with self._connection() as conn:
            conn.execute(
                f"UPDATE vps SET {assignments} WHERE id = ?",
                (*fields.values(), account_id),
            )

    async def delete(self, account_id: int) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM vps WHERE id = ?", (account_id,))
        logger.info(f"Deleted VPS {account_id}")

    async def apply_scrape_success(self, account_id: int, update: ScrapeSuccessUpdate) -> None:
        """
        Persist a successful scrape using the sticky-on-null merge

        Raises:
            AccountNotFoundError: If the account no longer exists
        """
        account = await self.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        merged = merge_scrape_success(account, update)
        with self._connection() as conn:
            conn.execute(
                """
                UPDATE vps
                SET valid_until = ?, ip = ?, location = ?, creation_date = ?,
                    cookie_status = ?, update_time = ?
                WHERE id = ?
                """,
                (
                    _to_db(merged.valid_until),
                    merged.ip,
                    merged.location,
                    _to_db(merged.creation_date),
                    merged.cookie_status.value,
                    _to_db(merged.update_time),
                    account_id,
                ),
            )

    async def apply_scrape_failure(self, account_id: int, observed_at: datetime) -> None:
        """
        Mark the cookie invalid, leaving the last known facts untouched

        Raises:
            AccountNotFoundError: If the account no longer exists
        """
        with self._connection() as conn:
            cursor = conn.execute(
                "UPDATE vps SET cookie_status = ?, update_time = ? WHERE id = ?",
                (CookieStatus.INVALID.value, _to_db(observed_at), account_id),
            )
            updated = cursor.rowcount
        if updated == 0:
            raise AccountNotFoundError(account_id)
