"""Write a backup to the backup directory.

Usage:
    python -m toursite.scripts.backup_app_data             # app-data JSON
    python -m toursite.scripts.backup_app_data --complete  # .mswbak archive
"""

import argparse

from sqlmodel import Session

from toursite.backup import create_app_data_backup, create_complete_backup
from toursite.core.db import engine
from toursite.core.logging import setup_logging


def main() -> None:
    setup_logging()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--complete", action="store_true", help="Include uploads in a .mswbak archive"
    )
    args = parser.parse_args()

    with Session(engine) as session:
        if args.complete:
            result = create_complete_backup(session)
        else:
            result = create_app_data_backup(session)

    print(f"Backup written: {result.file.filename} ({result.file.size} bytes)")
    for table, count in result.counts.items():
        print(f"  {table}: {count}")


if __name__ == "__main__":
    main()
