import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from missiondb.config import ConfigurationError, DatabaseSettings, collect_properties
from missiondb.database import Database, DatabaseError
from missiondb.models import derive_login_handle


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a moon mission console account")
    parser.add_argument("first_name", help="Account holder's first name")
    parser.add_argument("last_name", help="Account holder's last name")
    parser.add_argument("ssn", help="National identity number")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML properties file (defaults to APP_DB_URL, APP_DB_USER and APP_DB_PASS from the environment)",
    )
    parser.add_argument(
        "-D",
        "--define",
        dest="definitions",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a connection property",
    )
    return parser.parse_args(argv)


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not password:
            print("Password must not be empty.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        properties = collect_properties(args.config, args.definitions)
        settings = DatabaseSettings.resolve(properties, os.environ)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    password = prompt_for_password()
    first_name = args.first_name.strip()
    last_name = args.last_name.strip()

    try:
        with Database.from_settings(settings) as database:
            created = database.create_account(first_name, last_name, args.ssn.strip(), password)
    except DatabaseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if created == 0:
        print("Error: the account was not created.", file=sys.stderr)
        return 1

    print(f"Created account with login handle {derive_login_handle(first_name, last_name)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
