"""CLI commands for the food trigger tracker."""

import argparse
import json
import logging
import sys
from datetime import datetime

from sqlalchemy.orm import Session

from foodtrigger.config import configure_logging, settings
from foodtrigger.database import Base, SessionLocal, engine
from foodtrigger.services.analysis_run_service import AnalysisRunService, default_date_range
from foodtrigger.services.correlation import (
    AnalysisConfig,
    AnalysisOrchestrator,
    DateRange,
    InMemoryEventStore,
)
from foodtrigger.services.report_service import (
    results_to_csv,
    results_to_table,
    sort_results,
)

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create all tables."""
    import foodtrigger.models  # noqa: F401 - registers tables on Base.metadata

    Base.metadata.create_all(engine)
    print("Database tables created.")


def analyze(
    start: datetime | None = None,
    end: datetime | None = None,
    include_combinations: bool = False,
    input_path: str | None = None,
    output_format: str = "table",
    days: int | None = None,
) -> None:
    """
    Run a correlation analysis and print the findings.

    Reads events from ``input_path`` (JSON snapshot) when given, otherwise from
    the database, in which case the run is recorded as an AnalysisRun.
    """
    start, end = default_date_range(start, end, days)
    if start > end:
        print("Error: --start must not be after --end.")
        sys.exit(1)

    config = AnalysisConfig.from_settings(settings)

    try:
        if input_path:
            store = InMemoryEventStore.from_json(input_path)
            report = AnalysisOrchestrator(store, store, config).run(
                DateRange.from_datetimes(start, end),
                include_combinations=include_combinations,
            )
        else:
            db: Session = SessionLocal()
            try:
                service = AnalysisRunService(db, config)
                run = service.create_run(start, end, include_combinations)
                report = service.execute_run(run)
            finally:
                db.close()
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: could not read {input_path}: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception("Correlation analysis failed")
        print(f"Error: analysis failed: {e}")
        sys.exit(1)

    if output_format == "csv":
        print(results_to_csv(report.results), end="")
    elif output_format == "json":
        print(json.dumps([r.to_dict() for r in sort_results(report.results)], indent=2))
    else:
        print(results_to_table(report.results))
        print(
            f"\nScanned {report.foods_scanned} foods x {report.symptoms_scanned} symptoms "
            f"({report.combinations_scanned} combinations) over "
            f"{report.intake_events} intake events and {report.observations} observations."
        )
        if report.skipped_records:
            print(f"Skipped {report.skipped_records} malformed record(s).")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Food trigger correlation CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Find food/symptom correlations"
    )
    analyze_parser.add_argument(
        "--days",
        type=int,
        help=f"Look back this many days (default {settings.correlation_default_range_days})",
    )
    analyze_parser.add_argument(
        "--start", type=datetime.fromisoformat, help="Range start (ISO 8601)"
    )
    analyze_parser.add_argument(
        "--end", type=datetime.fromisoformat, help="Range end (ISO 8601, default now)"
    )
    analyze_parser.add_argument(
        "--combinations",
        action="store_true",
        help="Also analyze food combinations for synergy",
    )
    analyze_parser.add_argument(
        "--input", dest="input_path", help="JSON event snapshot instead of the database"
    )
    analyze_parser.add_argument(
        "--format",
        dest="output_format",
        choices=["table", "csv", "json"],
        default="table",
    )

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "init-db":
        init_db()
    elif args.command == "analyze":
        analyze(
            start=args.start,
            end=args.end,
            include_combinations=args.combinations,
            input_path=args.input_path,
            output_format=args.output_format,
            days=args.days,
        )
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
