"""Validate the relay's ``.env`` file and detect drift.

``check`` loads the file and builds ``AppSettings``, listing any required
variable that is missing. ``record`` additionally writes a SHA256 baseline of
the file, and ``verify`` compares the file against that baseline so edits made
outside a deploy are noticed before a restart.

    python -m scripts.check_env record --env-file /srv/page-relay/.env \
        --hash-file /srv/page-relay/.env.sha256
    python -m scripts.check_env verify --env-file /srv/page-relay/.env \
        --hash-file /srv/page-relay/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import os
import sys
from pathlib import Path

from pydantic import ValidationError

from page_relay.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5

REQUIRED_VARIABLES = (
    "FB_APP_ID",
    "FB_APP_SECRET",
    "FB_REDIRECT_URI",
    "FRONTEND_URL",
    "N8N_WEBHOOK_URL",
    "INTERNAL_API_KEY",
)


def _checksum(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _missing_variables() -> list[str]:
    return [name for name in REQUIRED_VARIABLES if not os.environ.get(name)]


def _validate(env_file: Path) -> int:
    _load_env_file(str(env_file))
    missing = _missing_variables()
    if missing:
        print(f"Missing required settings: {', '.join(missing)}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    try:
        AppSettings()  # type: ignore[call-arg]
    except ValidationError as exc:
        print(f"Invalid settings:\n{exc.json(indent=2)}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    return EXIT_OK


def _record(env_file: Path, hash_file: Path) -> int:
    checksum = _checksum(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum {checksum} to {hash_file}")
    return EXIT_OK


def _verify(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"No checksum baseline at {hash_file}; run 'record' first.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR
    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _checksum(env_file)
    if expected != actual:
        print(
            f"Environment checksum mismatch: expected {expected}, got {actual}",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR
    print("Environment checksum OK.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "command",
        choices=("check", "record", "verify"),
        help="check: validate only; record/verify: also manage the checksum baseline.",
    )
    parser.add_argument("--env-file", type=Path, default=Path(".env"))
    parser.add_argument("--hash-file", type=Path)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command != "check" and args.hash_file is None:
        parser.error(f"--hash-file is required for '{args.command}'")

    env_file: Path = args.env_file
    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    status = _validate(env_file)
    if status != EXIT_OK:
        return status

    if args.command == "record":
        return _record(env_file, args.hash_file)
    if args.command == "verify":
        return _verify(env_file, args.hash_file)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
