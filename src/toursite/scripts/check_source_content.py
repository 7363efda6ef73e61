"""Check primary-language content for English text, optionally fixing it.

Usage:
    python -m toursite.scripts.check_source_content
    python -m toursite.scripts.check_source_content --fix --delay 3
"""

import argparse
import asyncio
import sys

from sqlmodel import Session

from toursite.content.registry import ContentType
from toursite.core.db import engine
from toursite.core.exceptions import TranslationProviderError
from toursite.core.logging import setup_logging
from toursite.translations.provider import get_translation_provider
from toursite.translations.repair import (
    SourceFixReport,
    fix_source_content,
    scan_source_content,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--type",
        dest="content_types",
        action="append",
        choices=[ct.value for ct in ContentType],
        help="Content type to check (repeatable, default: all)",
    )
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Translate flagged strings back into the primary language",
    )
    parser.add_argument("--delay", type=float, default=None)
    return parser


def print_report(report: SourceFixReport, fixed: bool) -> None:
    print(f"Items checked: {report.scanned}")
    print(f"Fields with English text: {len(report.findings)}")
    for finding in report.findings:
        print(
            f"  {finding.content_type}/{finding.content_id} {finding.field}: "
            f"{', '.join(finding.words)} ({finding.preview!r})"
        )
    if fixed:
        print(f"Fixed fields: {report.fixed_fields}")
        print(f"Failed fields: {report.failed_fields}")


async def run(args: argparse.Namespace) -> int:
    with Session(engine) as session:
        if not args.fix:
            scanned, findings = scan_source_content(
                session=session, content_types=args.content_types
            )
            print_report(SourceFixReport(scanned=scanned, findings=findings), fixed=False)
            return 0

        try:
            provider = get_translation_provider(session)
        except TranslationProviderError as e:
            print(f"Cannot fix: {e.message}", file=sys.stderr)
            return 2
        report = await fix_source_content(
            session=session,
            provider=provider,
            content_types=args.content_types,
            delay_seconds=args.delay,
        )
    print_report(report, fixed=True)
    return 1 if report.failed_fields else 0


def main() -> None:
    setup_logging()
    sys.exit(asyncio.run(run(build_parser().parse_args())))


if __name__ == "__main__":
    main()
