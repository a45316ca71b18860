"""Database gateway for accounts and moon missions."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from sqlalchemy import (
    Column,
    Date,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    extract,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import URL, Connection, Engine, Row, make_url
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .config import DatabaseSettings
from .models import Account, MoonMission, derive_login_handle
from .security import passwords_match

logger = logging.getLogger("missiondb.database")

metadata = MetaData()

account_table = Table(
    "account",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("ssn", String(32), nullable=False),
    # No unique constraint: two people can derive the same handle.
    Column("name", String(6), nullable=False, index=True),
    Column("password", String(255), nullable=False),
)

moon_mission_table = Table(
    "moon_mission",
    metadata,
    Column("mission_id", Integer, primary_key=True, autoincrement=False),
    Column("spacecraft", String(100), nullable=False),
    Column("launch_date", Date, nullable=False),
    Column("operator", String(100), nullable=False),
    Column("mission_type", String(100), nullable=False),
    Column("outcome", String(100), nullable=False),
)


class DatabaseError(RuntimeError):
    """A statement failed after the connection was established."""


class DatabaseConnectionError(DatabaseError):
    """The database connection could not be opened."""


def _describe(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def build_url(settings: DatabaseSettings) -> URL:
    """Combine the configured URL with the configured credentials.

    SQLite has no notion of users, so credentials are only attached for
    server backends.
    """

    url = make_url(settings.url)
    if url.get_backend_name() == "sqlite":
        return url
    return url.set(username=settings.username, password=settings.password)


class Database:
    """Single-connection gateway used for the lifetime of one console run."""

    def __init__(self, url: URL | str) -> None:
        self._url = url
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "Database":
        try:
            url = build_url(settings)
        except SQLAlchemyError as exc:
            raise DatabaseConnectionError(_describe(exc)) from exc
        return cls(url)

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def open(self) -> None:
        """Acquire the connection used by every subsequent statement."""

        if self._connection is not None:
            return
        try:
            url = make_url(self._url)
            engine = create_engine(url)
        except (SQLAlchemyError, ImportError) as exc:
            raise DatabaseConnectionError(str(exc)) from exc

        try:
            connection = engine.connect()
        except SQLAlchemyError as exc:
            engine.dispose()
            raise DatabaseConnectionError(_describe(exc)) from exc

        self._engine = engine
        self._connection = connection
        logger.info("Connected to %s", url.render_as_string(hide_password=True))

    def close(self) -> None:
        connection, self._connection = self._connection, None
        engine, self._engine = self._engine, None
        try:
            if connection is not None:
                connection.close()
        finally:
            if engine is not None:
                engine.dispose()
                logger.info("Database connection closed")

    def __enter__(self) -> "Database":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        """Run statements in a transaction, translating driver failures."""

        if self._connection is None:
            raise DatabaseError("Database connection is not open")
        try:
            with self._connection.begin():
                yield self._connection
        except SQLAlchemyError as exc:
            raise DatabaseError(_describe(exc)) from exc

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._transaction() as conn:
            metadata.create_all(conn)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def check_credentials(self, username: str, password: str) -> bool:
        """Return ``True`` if an account with this handle and password exists.

        Lookup failures are reported as a non-match rather than an error, so a
        lost connection looks like a failed login to the caller. The failure is
        logged so it still shows up in diagnostics.
        """

        try:
            with self._transaction() as conn:
                stored = conn.execute(
                    select(account_table.c.password).where(account_table.c.name == username)
                ).scalars().all()
        except DatabaseError as exc:
            logger.warning("Credential lookup failed: %s", exc)
            return False
        return any(passwords_match(password, value) for value in stored)

    # ------------------------------------------------------------------
    # Moon missions
    # ------------------------------------------------------------------
    def list_missions(self) -> List[MoonMission]:
        with self._transaction() as conn:
            rows = conn.execute(
                select(moon_mission_table).order_by(moon_mission_table.c.launch_date)
            ).fetchall()
        return [self._row_to_mission(row) for row in rows]

    def get_mission(self, mission_id: int) -> Optional[MoonMission]:
        with self._transaction() as conn:
            row = conn.execute(
                select(moon_mission_table).where(moon_mission_table.c.mission_id == mission_id)
            ).first()
        if row is None:
            return None
        return self._row_to_mission(row)

    def count_missions_by_year(self, year: int) -> int:
        with self._transaction() as conn:
            count = conn.execute(
                select(func.count())
                .select_from(moon_mission_table)
                .where(extract("year", moon_mission_table.c.launch_date) == year)
            ).scalar_one()
        return int(count)

    def insert_missions(self, missions: Iterable[MoonMission]) -> int:
        payload = [
            {
                "mission_id": mission.mission_id,
                "spacecraft": mission.spacecraft,
                "launch_date": mission.launch_date,
                "operator": mission.operator,
                "mission_type": mission.mission_type,
                "outcome": mission.outcome,
            }
            for mission in missions
        ]
        if not payload:
            return 0
        with self._transaction() as conn:
            conn.execute(insert(moon_mission_table), payload)
        return len(payload)

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------
    def create_account(self, first_name: str, last_name: str, ssn: str, password: str) -> int:
        """Insert an account and return the number of rows written."""

        with self._transaction() as conn:
            result = conn.execute(
                insert(account_table).values(
                    first_name=first_name,
                    last_name=last_name,
                    ssn=ssn,
                    name=derive_login_handle(first_name, last_name),
                    password=password,
                )
            )
            affected = result.rowcount
        return affected

    def update_password(self, user_id: int, password: str) -> int:
        with self._transaction() as conn:
            result = conn.execute(
                update(account_table)
                .where(account_table.c.user_id == user_id)
                .values(password=password)
            )
            affected = result.rowcount
        return affected

    def delete_account(self, user_id: int) -> int:
        with self._transaction() as conn:
            result = conn.execute(delete(account_table).where(account_table.c.user_id == user_id))
            affected = result.rowcount
        return affected

    def get_account(self, user_id: int) -> Optional[Account]:
        with self._transaction() as conn:
            row = conn.execute(
                select(account_table).where(account_table.c.user_id == user_id)
            ).first()
        if row is None:
            return None
        return self._row_to_account(row)

    def find_accounts_by_name(self, name: str) -> List[Account]:
        with self._transaction() as conn:
            rows = conn.execute(
                select(account_table)
                .where(account_table.c.name == name)
                .order_by(account_table.c.user_id)
            ).fetchall()
        return [self._row_to_account(row) for row in rows]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _row_to_mission(self, row: Row) -> MoonMission:
        return MoonMission(
            mission_id=int(row.mission_id),
            spacecraft=str(row.spacecraft),
            launch_date=row.launch_date,
            operator=str(row.operator),
            mission_type=str(row.mission_type),
            outcome=str(row.outcome),
        )

    def _row_to_account(self, row: Row) -> Account:
        return Account(
            user_id=int(row.user_id),
            first_name=str(row.first_name),
            last_name=str(row.last_name),
            ssn=str(row.ssn),
            name=str(row.name),
            password=str(row.password),
        )


__all__ = [
    "Database",
    "DatabaseConnectionError",
    "DatabaseError",
    "account_table",
    "build_url",
    "metadata",
    "moon_mission_table",
]
