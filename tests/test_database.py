from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Tuple

import pytest
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError

from missiondb.config import DatabaseSettings
from missiondb.database import Database, DatabaseConnectionError, DatabaseError, build_url
from missiondb.models import MoonMission


def account_ids(db: Database, *handles: str) -> Tuple[int, ...]:
    return tuple(account.user_id for handle in handles for account in db.find_accounts_by_name(handle))


def _outage(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("server has gone away"))


def test_check_credentials_requires_exact_match(database: Database) -> None:
    assert database.check_credentials("NeiArm", "tranquility") is True
    assert database.check_credentials("NeiArm", "Tranquility") is False
    assert database.check_credentials("neiarm", "tranquility") is False
    assert database.check_credentials("NeiArm", "tranquility ") is False
    assert database.check_credentials("Nobody", "tranquility") is False


def test_check_credentials_reports_failures_as_mismatch(
    database: Database, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(Connection, "execute", _outage)
    assert database.check_credentials("NeiArm", "tranquility") is False


def test_check_credentials_on_closed_gateway_is_a_mismatch(database_url: str) -> None:
    assert Database(database_url).check_credentials("NeiArm", "tranquility") is False


def test_list_missions_is_ordered_by_launch_date(database: Database) -> None:
    missions = database.list_missions()
    launch_dates = [mission.launch_date for mission in missions]

    assert launch_dates == sorted(launch_dates)
    assert [mission.spacecraft for mission in missions] == [
        "Apollo 8",
        "Apollo 11",
        "Apollo 12",
        "Apollo 17",
    ]


def test_get_mission_returns_every_field(database: Database) -> None:
    assert database.get_mission(11) == MoonMission(
        11, "Apollo 11", date(1969, 7, 16), "NASA", "Crewed lander", "Successful"
    )
    assert database.get_mission(99) is None


@pytest.mark.parametrize(("year", "expected"), [(1968, 1), (1969, 2), (1970, 0), (1972, 1)])
def test_count_missions_by_year(database: Database, year: int, expected: int) -> None:
    assert database.count_missions_by_year(year) == expected


def test_create_account_derives_login_handle(database: Database) -> None:
    assert database.create_account("Al", "B", "000", "secret") == 1

    (account,) = database.find_accounts_by_name("AlB")
    assert (account.first_name, account.last_name, account.ssn, account.password) == (
        "Al",
        "B",
        "000",
        "secret",
    )
    assert database.check_credentials("AlB", "secret")


def test_duplicate_login_handles_are_not_rejected(database: Database) -> None:
    database.create_account("Neil", "Armstrong", "other", "second")

    accounts = database.find_accounts_by_name("NeiArm")
    assert len(accounts) == 2
    assert accounts[0].user_id != accounts[1].user_id
    assert database.check_credentials("NeiArm", "second")
    assert database.check_credentials("NeiArm", "tranquility")


def test_update_password_changes_only_the_target_row(database: Database) -> None:
    neil_id, michael_id = account_ids(database, "NeiArm", "MicCol")

    assert database.update_password(neil_id, "eagle") == 1

    assert database.get_account(neil_id).password == "eagle"
    assert database.get_account(michael_id).password == "columbia"


def test_missing_ids_affect_no_rows(database: Database) -> None:
    before = [database.get_account(user_id) for user_id in account_ids(database, "NeiArm", "MicCol")]

    assert database.update_password(9999, "nope") == 0
    assert database.delete_account(9999) == 0

    after = [database.get_account(user_id) for user_id in account_ids(database, "NeiArm", "MicCol")]
    assert after == before


def test_delete_account(database: Database) -> None:
    (neil_id,) = account_ids(database, "NeiArm")

    assert database.delete_account(neil_id) == 1
    assert database.get_account(neil_id) is None
    assert database.check_credentials("NeiArm", "tranquility") is False


def test_statement_failures_raise_database_error(
    database: Database, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(Connection, "execute", _outage)

    with pytest.raises(DatabaseError, match="server has gone away"):
        database.list_missions()
    with pytest.raises(DatabaseError, match="server has gone away"):
        database.delete_account(1)


def test_gateway_recovers_after_failed_statement(
    database: Database, monkeypatch: pytest.MonkeyPatch
) -> None:
    with monkeypatch.context() as patch:
        patch.setattr(Connection, "execute", _outage)
        with pytest.raises(DatabaseError):
            database.count_missions_by_year(1969)

    assert database.count_missions_by_year(1969) == 2


def test_statements_on_closed_gateway_raise(database_url: str) -> None:
    with pytest.raises(DatabaseError, match="not open"):
        Database(database_url).list_missions()


def test_close_releases_connection(database_url: str) -> None:
    database = Database(database_url)
    with database:
        assert database.is_open
    assert not database.is_open


def test_unreachable_database_raises_connection_error(tmp_path: Path) -> None:
    database = Database(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite3'}")
    with pytest.raises(DatabaseConnectionError):
        database.open()
    assert not database.is_open


def test_unknown_backend_raises_connection_error() -> None:
    with pytest.raises(DatabaseConnectionError):
        Database("nosuchdialect://host/db").open()


def test_build_url_attaches_credentials_for_server_backends() -> None:
    url = build_url(DatabaseSettings("postgresql://db.example.com/missions", "astro", "s3cret"))
    assert url.username == "astro"
    assert url.password == "s3cret"
    assert url.host == "db.example.com"


def test_build_url_leaves_sqlite_urls_untouched() -> None:
    url = build_url(DatabaseSettings("sqlite:///missions.sqlite3", "astro", "s3cret"))
    assert url.username is None
    assert url.database == "missions.sqlite3"


def test_from_settings_rejects_malformed_url() -> None:
    with pytest.raises(DatabaseConnectionError):
        Database.from_settings(DatabaseSettings("not a url", "astro", "s3cret"))
