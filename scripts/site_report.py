#!/usr/bin/env python3
"""
Generate a site cost report from a JSON export.

The export is a JSON object with ``activities`` and ``labor`` arrays in the
backend's record shape, plus optional ``company`` and ``project`` objects.

Usage:
    python3 scripts/site_report.py --input export.json
    python3 scripts/site_report.py --input export.json --start 2023-06-01 --end 2023-06-30
    python3 scripts/site_report.py --input export.json --activity imported --json
    python3 scripts/site_report.py --input export.json --config site.yaml --best-effort
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sitecost_config import get_active_config  # noqa: E402
from sitecost_ingestion import JsonExportAdapter, ValidationPolicy  # noqa: E402
from sitecost_kernel.domain.activities import ProjectRef  # noqa: E402
from sitecost_kernel.exceptions import SiteCostError  # noqa: E402
from sitecost_kernel.logging_config import LogContext, configure_logging  # noqa: E402
from sitecost_modules.reporting import (  # noqa: E402
    ActivityFilter,
    CompanyInfo,
    CostReportService,
    ReportContext,
    ReportRequest,
    render_text_summary,
    render_to_dict,
)


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from e


def _context_from_export(export, prepared_by: str | None) -> ReportContext:
    company = None
    if export.company:
        company = CompanyInfo(
            name=str(export.company.get("name") or export.company.get("companyName") or "Company"),
            address=export.company.get("address"),
            phone=export.company.get("phone"),
            email=export.company.get("email"),
        )
    project = None
    project_id = export.project.get("_id") or export.project.get("id")
    if project_id is not None:
        project = ProjectRef(id=str(project_id), name=str(export.project.get("name") or ""))
    return ReportContext(project=project, company=company, prepared_by=prepared_by)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Site material and labor cost report.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--input", type=Path, required=True,
        help="JSON export with 'activities' and 'labor'",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML settings file (default: built-in defaults)",
    )
    parser.add_argument("--start", type=_parse_day, default=None, help="First day (YYYY-MM-DD)")
    parser.add_argument("--end", type=_parse_day, default=None, help="Last day (YYYY-MM-DD)")
    parser.add_argument(
        "--activity", choices=[f.value for f in ActivityFilter], default="all",
        help="Only include one activity kind",
    )
    parser.add_argument(
        "--best-effort", action="store_true",
        help="Skip invalid records instead of aborting",
    )
    parser.add_argument("--prepared-by", type=str, default=None, help="Name for the header")
    parser.add_argument("--json", action="store_true", help="Output the report as JSON")
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(
        level=logging.INFO if args.verbose else logging.WARNING,
        stream=sys.stderr,
    )

    try:
        with LogContext.bind(export_path=str(args.input)):
            config = get_active_config(args.config)
            export = JsonExportAdapter().read(args.input)
            request = ReportRequest(
                period_start=args.start,
                period_end=args.end,
                activity_filter=ActivityFilter(args.activity),
                policy=ValidationPolicy.BEST_EFFORT if args.best_effort else None,
            )
            service = CostReportService(config=config)
            document = service.generate_report(
                export.activities,
                export.labor,
                context=_context_from_export(export, args.prepared_by),
                request=request,
            )
    except SiteCostError as e:
        print(f"error [{e.code}]: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(render_to_dict(document), indent=2, ensure_ascii=False))
    else:
        print(
            render_text_summary(
                document,
                grouping=config.digit_grouping,
                places=config.display_precision,
            ),
            end="",
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
