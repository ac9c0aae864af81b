"""Validate the bridge's environment configuration before starting it.

Commands::

    # Fail fast when EPIC_CLIENT_ID / REDIRECT_URI are missing or malformed.
    python -m scripts.check_env check --env-file /srv/skinchecker/.env

    # Print the resolved configuration with secrets masked.
    python -m scripts.check_env show --env-file /srv/skinchecker/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import ValidationError

from app.core.config import AppSettings

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 5

_SECRET_FIELDS = {"client_secret", "api_key", "token_encryption_secret"}


def _load_settings(env_file: Path) -> AppSettings:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )
    load_dotenv(env_file, override=False)
    return AppSettings()  # type: ignore[call-arg]


def _mask(values: Dict[str, Any]) -> Dict[str, Any]:
    masked: Dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, dict):
            masked[key] = _mask(value)
        elif key in _SECRET_FIELDS and value:
            masked[key] = "***"
        else:
            masked[key] = value
    return masked


def _show(settings: AppSettings) -> int:
    for section, values in _mask(settings.model_dump(mode="json")).items():
        if isinstance(values, dict):
            for key, value in values.items():
                print(f"{section}.{key} = {value}")
        else:
            print(f"{section} = {values}")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the bridge's required settings."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("check", "Validate settings and exit."),
        ("show", "Validate settings and print them with secrets masked."),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = _load_settings(args.env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    if args.command == "show":
        return _show(settings)
    print("Environment OK.")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
