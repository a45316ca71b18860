from __future__ import annotations

import io
from datetime import date
from pathlib import Path
from typing import Iterator

import pytest

from missiondb.console import Console
from missiondb.database import Database
from missiondb.models import MoonMission

FIXTURE_MISSIONS = (
    MoonMission(11, "Apollo 11", date(1969, 7, 16), "NASA", "Crewed lander", "Successful"),
    MoonMission(8, "Apollo 8", date(1968, 12, 21), "NASA", "Crewed orbiter", "Successful"),
    MoonMission(17, "Apollo 17", date(1972, 12, 7), "NASA", "Crewed lander", "Successful"),
    MoonMission(12, "Apollo 12", date(1969, 11, 14), "NASA", "Crewed lander", "Successful"),
)


class ScriptedConsole(Console):
    """Console fed from a fixed list of input lines."""

    def __init__(self, *lines: str) -> None:
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        super().__init__(io.StringIO("".join(f"{line}\n" for line in lines)), self.stdout, self.stderr)

    @property
    def output(self) -> str:
        return self.stdout.getvalue()

    @property
    def errors(self) -> str:
        return self.stderr.getvalue()


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'missions.sqlite3'}"


@pytest.fixture()
def database(database_url: str) -> Iterator[Database]:
    db = Database(database_url)
    with db:
        db.initialize()
        db.insert_missions(FIXTURE_MISSIONS)
        db.create_account("Neil", "Armstrong", "19300805-1234", "tranquility")
        db.create_account("Michael", "Collins", "19301031-5678", "columbia")
        yield db


@pytest.fixture()
def console_factory():
    def factory(*lines: str) -> ScriptedConsole:
        return ScriptedConsole(*lines)

    return factory
