#!/usr/bin/env python3
"""
Export the financial report for a period.

Writes the semicolon-delimited CSV (UTF-8 with BOM) to ``--out``, or prints
the report as JSON when ``--out`` is omitted.

Usage:
    python3 scripts/export_financial_report.py --from 2025-01-01 --to 2025-01-31
    python3 scripts/export_financial_report.py --from 2025-01-01T00:00:00Z \\
        --to 2025-01-31T23:59:59Z --out report.csv
"""

import argparse
import json
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def main() -> int:
    parser = argparse.ArgumentParser(description="Export the workshop financial report")
    parser.add_argument("--from", dest="from_date", required=True, help="Period start (ISO-8601)")
    parser.add_argument("--to", dest="to_date", required=True, help="Period end (ISO-8601)")
    parser.add_argument("--out", type=Path, default=None,
                        help="CSV file, or a directory to use the default file name")
    args = parser.parse_args()

    from workshop_config import get_active_settings
    from workshop_kernel.db.engine import init_engine_from_url, session_scope
    from workshop_kernel.exceptions import WorkshopError
    from workshop_kernel.logging_config import configure_logging
    from workshop_modules.reporting import (
        ReportingConfig,
        ReportingService,
        render_financial_report_csv,
        render_to_dict,
        report_filename,
    )

    settings = get_active_settings()
    configure_logging(level=settings.logging.level, stream=sys.stderr)
    init_engine_from_url(settings.database.url, echo=settings.database.echo)
    config = ReportingConfig.from_dict(settings.reporting)

    try:
        with session_scope() as session:
            report = ReportingService(session, config=config).get_financial_report(
                args.from_date, args.to_date
            )
    except WorkshopError as exc:
        print(f"error: {exc.code}: {exc.message}", file=sys.stderr)
        return 1

    if args.out is None:
        json.dump(render_to_dict(report), sys.stdout, indent=2, ensure_ascii=False)
        print()
        return 0

    out = args.out / report_filename(report) if args.out.is_dir() else args.out
    out.write_bytes(render_financial_report_csv(report, config))
    print(f"Wrote {out} ({report.completed_orders} orders, revenue {report.revenue})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
