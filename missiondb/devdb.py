"""Local SQLite database for development runs."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Tuple

from .config import PASSWORD_KEY, URL_KEY, USER_KEY
from .database import Database
from .models import MoonMission, derive_login_handle

logger = logging.getLogger("missiondb.devdb")

DEV_DB_USER = "dev"
DEV_DB_PASSWORD = "dev"

# first name, last name, ssn, password
DEV_ACCOUNT: Tuple[str, str, str, str] = ("Buzz", "Aldrin", "19300120-0000", "eagle1969")

SEED_MISSIONS = (
    MoonMission(1, "Luna 2", date(1959, 9, 12), "OKB-1", "Impactor", "Successful"),
    MoonMission(2, "Ranger 7", date(1964, 7, 28), "NASA", "Impactor", "Successful"),
    MoonMission(3, "Luna 9", date(1966, 1, 31), "Lavochkin", "Lander", "Successful"),
    MoonMission(4, "Surveyor 1", date(1966, 5, 30), "NASA", "Lander", "Successful"),
    MoonMission(5, "Apollo 8", date(1968, 12, 21), "NASA", "Crewed orbiter", "Successful"),
    MoonMission(6, "Apollo 10", date(1969, 5, 18), "NASA", "Crewed orbiter", "Successful"),
    MoonMission(7, "Apollo 11", date(1969, 7, 16), "NASA", "Crewed lander", "Successful"),
    MoonMission(8, "Apollo 12", date(1969, 11, 14), "NASA", "Crewed lander", "Successful"),
    MoonMission(9, "Apollo 13", date(1970, 4, 11), "NASA", "Crewed lander", "Partial failure"),
    MoonMission(10, "Luna 16", date(1970, 9, 12), "Lavochkin", "Sample return", "Successful"),
    MoonMission(11, "Apollo 17", date(1972, 12, 7), "NASA", "Crewed lander", "Successful"),
    MoonMission(12, "Chang'e 4", date(2018, 12, 7), "CNSA", "Lander", "Successful"),
)


def resolve_dev_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the development database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "dev.sqlite3").resolve(strict=False)


def dev_login() -> Tuple[str, str]:
    first_name, last_name, _, password = DEV_ACCOUNT
    return derive_login_handle(first_name, last_name), password


def bootstrap_dev_database(path: Path) -> Dict[str, str]:
    """Create and seed the development database, returning its connection properties."""

    path.parent.mkdir(parents=True, exist_ok=True)
    url = f"sqlite:///{path}"

    with Database(url) as database:
        database.initialize()

        if not database.list_missions():
            inserted = database.insert_missions(SEED_MISSIONS)
            logger.info("Seeded %d moon missions", inserted)

        handle, password = dev_login()
        if not database.check_credentials(handle, password):
            first_name, last_name, ssn, _ = DEV_ACCOUNT
            database.create_account(first_name, last_name, ssn, password)
            logger.info("Created development account %s", handle)

    logger.info("Development database ready at %s", path)
    return {URL_KEY: url, USER_KEY: DEV_DB_USER, PASSWORD_KEY: DEV_DB_PASSWORD}


__all__ = [
    "DEV_ACCOUNT",
    "SEED_MISSIONS",
    "bootstrap_dev_database",
    "dev_login",
    "resolve_dev_database_path",
]
