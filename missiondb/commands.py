"""Main menu and the commands it dispatches to."""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Callable, Dict, Optional

from .console import Console
from .database import Database, DatabaseError
from .sessions import Session

logger = logging.getLogger("missiondb.commands")

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class Command(Enum):
    """Menu entries, keyed by the token the user types."""

    LIST_MISSIONS = ("1", "List moon missions")
    GET_MISSION = ("2", "Get a moon mission by mission_id")
    COUNT_MISSIONS_BY_YEAR = ("3", "Count missions for a given year")
    CREATE_ACCOUNT = ("4", "Create an account")
    UPDATE_PASSWORD = ("5", "Update an account password")
    DELETE_ACCOUNT = ("6", "Delete an account")
    EXIT = ("0", "Exit")

    def __init__(self, token: str, label: str) -> None:
        self.token = token
        self.label = label

    @classmethod
    def from_token(cls, token: str) -> Optional["Command"]:
        for command in cls:
            if command.token == token:
                return command
        return None


def parse_integer(text: str, bits: int) -> Optional[int]:
    """Parse a signed integer that must fit in ``bits`` bits.

    Only ASCII digits with an optional sign are accepted; surrounding
    whitespace makes the value invalid.
    """

    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    value = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        return None
    return value


def _report_database_error(console: Console, exc: DatabaseError) -> None:
    logger.debug("Command failed", exc_info=exc)
    console.error(f"Database error: {exc}")


def list_missions(database: Database, console: Console) -> None:
    try:
        missions = database.list_missions()
    except DatabaseError as exc:
        _report_database_error(console, exc)
        return

    console.say()
    console.say("=== Moon Missions ===")
    for mission in missions:
        console.say(mission.spacecraft)


def get_mission(database: Database, console: Console) -> None:
    mission_id = parse_integer(console.prompt("Enter mission ID: "), 64)
    if mission_id is None:
        console.say("Invalid mission ID format")
        return

    try:
        mission = database.get_mission(mission_id)
    except DatabaseError as exc:
        _report_database_error(console, exc)
        return

    if mission is None:
        console.say(f"No mission found with ID: {mission_id}")
        return

    console.say()
    console.say(f"Mission ID: {mission.mission_id}")
    console.say(f"Spacecraft: {mission.spacecraft}")
    console.say(f"Launch date: {mission.launch_date.isoformat()}")
    console.say(f"Operator: {mission.operator}")
    console.say(f"Mission type: {mission.mission_type}")
    console.say(f"Outcome: {mission.outcome}")


def count_missions_by_year(database: Database, console: Console) -> None:
    year = parse_integer(console.prompt("Enter year: "), 32)
    if year is None:
        console.say("Invalid year format")
        return

    try:
        count = database.count_missions_by_year(year)
    except DatabaseError as exc:
        _report_database_error(console, exc)
        return

    console.say(f"Number of missions in {year}: {count}")


def create_account(database: Database, console: Console) -> None:
    first_name = console.prompt("Enter first name: ")
    last_name = console.prompt("Enter last name: ")
    ssn = console.prompt("Enter SSN: ")
    password = console.prompt("Enter password: ")

    try:
        created = database.create_account(first_name, last_name, ssn, password)
    except DatabaseError as exc:
        _report_database_error(console, exc)
        return

    if created > 0:
        console.say("Account created successfully")
    else:
        console.say("Failed to create account")


def update_password(database: Database, console: Console) -> None:
    raw_user_id = console.prompt("Enter user ID: ")
    # The new password is read even when the ID turns out to be malformed.
    new_password = console.prompt("Enter new password: ")

    user_id = parse_integer(raw_user_id, 64)
    if user_id is None:
        console.say("Invalid user ID format")
        return

    try:
        updated = database.update_password(user_id, new_password)
    except DatabaseError as exc:
        _report_database_error(console, exc)
        return

    if updated > 0:
        console.say("Password updated successfully")
    else:
        console.say(f"No account found with ID: {user_id}")


def delete_account(database: Database, console: Console) -> None:
    user_id = parse_integer(console.prompt("Enter user ID: "), 64)
    if user_id is None:
        console.say("Invalid user ID format")
        return

    try:
        deleted = database.delete_account(user_id)
    except DatabaseError as exc:
        _report_database_error(console, exc)
        return

    if deleted > 0:
        console.say("Account deleted successfully")
    else:
        console.say(f"No account found with ID: {user_id}")


Handler = Callable[[Database, Console], None]

HANDLERS: Dict[Command, Handler] = {
    Command.LIST_MISSIONS: list_missions,
    Command.GET_MISSION: get_mission,
    Command.COUNT_MISSIONS_BY_YEAR: count_missions_by_year,
    Command.CREATE_ACCOUNT: create_account,
    Command.UPDATE_PASSWORD: update_password,
    Command.DELETE_ACCOUNT: delete_account,
}


def _print_menu(console: Console) -> None:
    console.say()
    console.say("=== MAIN MENU ===")
    for command in (*HANDLERS, Command.EXIT):
        console.say(f"{command.token}) {command.label}")


def run_menu(database: Database, console: Console, session: Session) -> None:
    """Dispatch menu selections until the user chooses to exit."""

    if not session.logged_in:
        raise PermissionError("The main menu requires a logged-in session")

    while True:
        _print_menu(console)
        command = Command.from_token(console.prompt("Choose option: "))

        if command is None:
            console.say("Invalid option. Please try again.")
            continue
        if command is Command.EXIT:
            console.say("Exiting...")
            return

        logger.debug("Running %s", command.name)
        HANDLERS[command](database, console)


__all__ = [
    "Command",
    "HANDLERS",
    "count_missions_by_year",
    "create_account",
    "delete_account",
    "get_mission",
    "list_missions",
    "parse_integer",
    "run_menu",
    "update_password",
]
