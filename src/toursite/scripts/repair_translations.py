"""Find and repair stored translations that still contain source-language text.

Usage:
    python -m toursite.scripts.repair_translations                 # report only
    python -m toursite.scripts.repair_translations --mode delete
    python -m toursite.scripts.repair_translations --mode retranslate --delay 3
    python -m toursite.scripts.repair_translations --type package --lang en
"""

import argparse
import asyncio
import sys

from sqlmodel import Session

from toursite.content.registry import ContentType
from toursite.core.db import engine
from toursite.core.exceptions import TranslationProviderError
from toursite.core.logging import setup_logging
from toursite.i18n.config import SECONDARY_LOCALES
from toursite.translations.models import RepairReport
from toursite.translations.provider import TranslationProvider, get_translation_provider
from toursite.translations.repair import RepairMode, repair_translations


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in RepairMode],
        default=RepairMode.REPORT.value,
        help="report (default), delete flagged rows, or retranslate them",
    )
    parser.add_argument(
        "--type",
        dest="content_types",
        action="append",
        choices=[ct.value for ct in ContentType],
        help="Content type to scan (repeatable, default: all)",
    )
    parser.add_argument(
        "--lang",
        dest="languages",
        action="append",
        choices=list(SECONDARY_LOCALES),
        help="Language to scan (repeatable, default: all secondary languages)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds between provider calls when retranslating",
    )
    return parser


def print_report(report: RepairReport) -> None:
    print(f"Scanned translations: {report.scanned}")
    print(f"Corrupted translations: {len(report.corrupted)}")
    for finding in report.corrupted:
        fields = ", ".join(finding.flagged_fields)
        print(
            f"  {finding.content_type}/{finding.content_id} "
            f"[{finding.language}] fields: {fields}"
        )
    if report.mode != RepairMode.REPORT.value:
        print(f"Repaired: {report.repaired}")
        print(f"Failed: {report.failed}")


async def run(args: argparse.Namespace) -> int:
    mode = RepairMode(args.mode)
    with Session(engine) as session:
        provider: TranslationProvider | None = None
        if mode is RepairMode.RETRANSLATE:
            try:
                provider = get_translation_provider(session)
            except TranslationProviderError as e:
                print(f"Cannot retranslate: {e.message}", file=sys.stderr)
                return 2
        report = await repair_translations(
            session=session,
            provider=provider,
            mode=mode,
            content_types=args.content_types,
            languages=args.languages,
            delay_seconds=args.delay,
        )
    print_report(report)
    return 1 if report.failed else 0


def main() -> None:
    setup_logging()
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
