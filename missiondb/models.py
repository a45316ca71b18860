"""Domain models for the moon mission console."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

_HANDLE_FRAGMENT = 3


@dataclass(frozen=True)
class MoonMission:
    """A row from the ``moon_mission`` reference table."""

    mission_id: int
    spacecraft: str
    launch_date: date
    operator: str
    mission_type: str
    outcome: str


@dataclass(frozen=True)
class Account:
    """Represents an account row stored in the ``account`` table."""

    user_id: int
    first_name: str
    last_name: str
    ssn: str
    name: str
    password: str


def derive_login_handle(first_name: str, last_name: str) -> str:
    """Build the login handle from the leading characters of each name.

    Names shorter than three characters contribute what they have. Handles are
    not checked for collisions with existing accounts.
    """

    return first_name[:_HANDLE_FRAGMENT] + last_name[:_HANDLE_FRAGMENT]


__all__ = ["Account", "MoonMission", "derive_login_handle"]
