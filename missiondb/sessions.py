"""Login state and the credential gate in front of the main menu."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .console import Console
from .database import Database

logger = logging.getLogger("missiondb.sessions")

EXIT_TOKEN = "0"


class AuthResult(Enum):
    AUTHENTICATED = "authenticated"
    ABORTED = "aborted"


@dataclass
class Session:
    """Authentication state for one interactive run.

    The logged-in account is not remembered; commands act on the IDs the user
    types in.
    """

    logged_in: bool = False


def authenticate(database: Database, console: Console, session: Session) -> AuthResult:
    """Prompt for credentials until they match an account or the user gives up.

    There is no attempt limit and no backoff between attempts.
    """

    attempts = 0
    while True:
        username = console.prompt("Username: ")
        password = console.prompt("Password: ")
        attempts += 1

        if database.check_credentials(username, password):
            session.logged_in = True
            logger.info("Login succeeded after %d attempt(s)", attempts)
            return AuthResult.AUTHENTICATED

        console.say("Invalid username or password")
        choice = console.prompt("Enter 0 to exit or any key to try again: ")
        if choice.strip() == EXIT_TOKEN:
            logger.info("Login aborted after %d failed attempt(s)", attempts)
            return AuthResult.ABORTED


__all__ = ["AuthResult", "EXIT_TOKEN", "Session", "authenticate"]
