"""Restore a complete ``.mswbak`` archive.

Runs as a subprocess of the restore-complete endpoint, which streams this
script's stdout to the client; progress lines are flushed as they happen.

Usage:
    python -m toursite.scripts.restore_complete path/to/backup.mswbak
"""

import argparse
from pathlib import Path
import sys

from sqlmodel import Session

from toursite.backup import restore_complete_archive
from toursite.core.db import engine
from toursite.core.exceptions import AppException
from toursite.core.logging import setup_logging


def emit(line: str) -> None:
    print(line, flush=True)


def main() -> None:
    setup_logging()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("archive", type=Path)
    args = parser.parse_args()

    if not args.archive.is_file():
        emit(f"Archive not found: {args.archive}")
        sys.exit(2)

    emit(f"Restoring from {args.archive.name}")
    try:
        with Session(engine) as session:
            result = restore_complete_archive(session, args.archive, log=emit)
    except AppException as e:
        emit(f"Error: {e.message}")
        sys.exit(1)

    for table, count in result.counts.items():
        emit(f"  {table}: {count} rows")
    emit(f"  uploads: {result.uploads_restored} files")


if __name__ == "__main__":
    main()
