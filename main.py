"""Command-line interface for the moon mission console."""

from __future__ import annotations
import argparse
import logging
import os
from pathlib import Path
from typing import Mapping, Sequence

try:
    import sqlalchemy  # noqa: F401
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'SQLAlchemy' package is required. Execute `pip install -e .` to install dependencies."
    ) from exc

from missiondb.commands import run_menu
from missiondb.config import (
    ConfigurationError,
    DatabaseSettings,
    collect_properties,
    env_flag,
    resolve_value,
)
from missiondb.console import Console
from missiondb.database import Database, DatabaseConnectionError, DatabaseError
from missiondb.devdb import bootstrap_dev_database, dev_login, resolve_dev_database_path
from missiondb.sessions import AuthResult, Session, authenticate

logger = logging.getLogger("missiondb.main")

DEV_MODE_PROPERTY = "devMode"
DEV_MODE_ENV = "DEV_MODE"
DEV_DB_PATH_KEY = "APP_DEV_DB_PATH"
LOG_LEVEL_ENV = "APP_LOG_LEVEL"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Moon mission and account console")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Create and seed a local SQLite database before starting the session",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file of properties such as APP_DB_URL, APP_DB_USER and APP_DB_PASS",
    )
    parser.add_argument(
        "-D",
        "--define",
        dest="definitions",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a property; takes precedence over --config and the environment",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: {LOG_LEVEL_ENV} or WARNING)",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def _configure_logging(level_name: str | None) -> None:
    name = (level_name or "WARNING").strip().upper()
    level = getattr(logging, name, None)
    if not isinstance(level, int):
        raise SystemExit(f"Unknown log level: {level_name}")
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def _dev_mode_requested(
    args: argparse.Namespace,
    properties: Mapping[str, str],
    environ: Mapping[str, str],
) -> bool:
    if args.dev:
        return True
    if env_flag(properties.get(DEV_MODE_PROPERTY)):
        return True
    return env_flag(environ.get(DEV_MODE_ENV))


def _resolve_settings(args: argparse.Namespace, environ: Mapping[str, str]) -> DatabaseSettings:
    properties = collect_properties(args.config, args.definitions)

    if _dev_mode_requested(args, properties, environ):
        dev_path = resolve_dev_database_path(resolve_value(DEV_DB_PATH_KEY, properties, environ))
        dev_properties = bootstrap_dev_database(dev_path)
        properties = collect_properties(args.config, args.definitions, defaults=dev_properties)
        handle, password = dev_login()
        print(f"Development database ready. Log in as {handle} / {password}")

    return DatabaseSettings.resolve(properties, environ)


def run_session(settings: DatabaseSettings, console: Console) -> AuthResult:
    """Log in and run the main menu on a single database connection."""

    with Database.from_settings(settings) as database:
        session = Session()
        result = authenticate(database, console, session)
        if result is AuthResult.AUTHENTICATED:
            run_menu(database, console, session)
        return result


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    _configure_logging(args.log_level or os.getenv(LOG_LEVEL_ENV))

    try:
        settings = _resolve_settings(args, os.environ)
    except ConfigurationError as exc:
        raise SystemExit(str(exc)) from exc
    except DatabaseError as exc:
        raise SystemExit(f"Development database bootstrap failed: {exc}") from exc

    with Console.from_stdio() as console:
        try:
            run_session(settings, console)
        except DatabaseConnectionError as exc:
            raise SystemExit(f"Database connection failed: {exc}") from exc
        except EOFError:
            console.say()
            logger.info("Input closed; ending session")
        except KeyboardInterrupt:
            console.say("\nExiting...")


if __name__ == "__main__":
    main()
