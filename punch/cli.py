"""
Punch command line: set up the database, print the summary report, run the server.

Usage:
  punch init alice
  punch init alice --overhead 10 --time-zone Europe/Berlin
  punch testdb alice --database-url sqlite:///./demo.db
  punch report
  punch server --bind 127.0.0.1:8080
"""
import argparse
import sys
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, sessionmaker

from punch.constants import DEFAULT_OVERHEAD_MINUTES, DEFAULT_PROJECT_NAME
from punch.core.config import settings
from punch.core.exceptions import PunchError
from punch.core.logging import setup_logging
from punch.db.init_db import DEMO_DEFAULT_SEED, create_tables, init_db, seed_demo_events
from punch.db.session import make_engine
from punch.services.report_service import render_text, summary_report
from punch.utils.datetime_utils import local_date, now_utc

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

DEFAULT_BIND = "127.0.0.1:8080"


def _session_factory(database_url: str) -> sessionmaker:
    engine = make_engine(database_url)
    create_tables(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new punch database."""
    db: Session = _session_factory(args.database_url)()
    try:
        project = init_db(
            db,
            args.username,
            project_name=args.project,
            overhead_minutes=args.overhead,
            time_zone=args.time_zone,
        )
        print(f"Created user {args.username} with project {project.name} (id={project.id}).")
    finally:
        db.close()
    return EXIT_SUCCESS


def cmd_testdb(args: argparse.Namespace) -> int:
    """Initialize a new punch database and populate it with demo sessions."""
    db: Session = _session_factory(args.database_url)()
    try:
        project = init_db(db, args.username, time_zone=args.time_zone)
        zone = ZoneInfo(project.time_zone or settings.TIME_ZONE)
        count = seed_demo_events(db, project, zone, local_date(now_utc(), zone), seed=args.seed)
        print(f"Created user {args.username} with {count} demo sessions.")
    finally:
        db.close()
    return EXIT_SUCCESS


def cmd_report(args: argparse.Namespace) -> int:
    """Show the current summary report on standard output."""
    db: Session = _session_factory(args.database_url)()
    try:
        result = summary_report(db, include_open=not args.closed_only)
    finally:
        db.close()
    sys.stdout.write(render_text(result))
    return EXIT_SUCCESS


def cmd_server(args: argparse.Namespace) -> int:
    """Run the web server."""
    import uvicorn

    from punch.core.deps import get_db
    from punch.main import app

    host, _, port = args.bind.rpartition(":")
    if not host or not port.isdigit():
        print(f"Invalid bind address: {args.bind} (expected HOST:PORT)", file=sys.stderr)
        return EXIT_FAILURE

    session_factory = _session_factory(args.database_url)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    print(f"Started http server: {args.bind}")
    uvicorn.run(app, host=host, port=int(port), log_level=settings.LOG_LEVEL.lower())
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="punch",
        description="Punch in, punch out, and report on time usage.",
    )
    database = argparse.ArgumentParser(add_help=False)
    database.add_argument(
        "-d", "--database-url",
        default=settings.DATABASE_URL,
        help=f"SQLAlchemy database URL (default: {settings.DATABASE_URL})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", parents=[database], help="Initialize a new Punch instance.")
    init.add_argument("username")
    init.add_argument("--project", default=DEFAULT_PROJECT_NAME, help="Name of the first project")
    init.add_argument("--overhead", type=int, default=DEFAULT_OVERHEAD_MINUTES, help="Overhead minutes per session")
    init.add_argument("--time-zone", default=None, help="IANA time zone for reports (default: TIME_ZONE setting)")
    init.set_defaults(func=cmd_init)

    testdb = subparsers.add_parser(
        "testdb", parents=[database], help="Create a new Punch database populated with test data."
    )
    testdb.add_argument("username")
    testdb.add_argument("--time-zone", default=None, help="IANA time zone for reports")
    testdb.add_argument("--seed", type=int, default=DEMO_DEFAULT_SEED, help="Random seed for the demo sessions")
    testdb.set_defaults(func=cmd_testdb)

    report = subparsers.add_parser("report", parents=[database], help="Display a summary report.")
    report.add_argument(
        "--closed-only", action="store_true", help="Leave a session in progress out of the totals"
    )
    report.set_defaults(func=cmd_report)

    server = subparsers.add_parser("server", parents=[database], help="Start the web server.")
    server.add_argument("-b", "--bind", default=DEFAULT_BIND, help=f"HOST:PORT to bind (default: {DEFAULT_BIND})")
    server.set_defaults(func=cmd_server)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()
    try:
        return args.func(args)
    except PunchError as e:
        print(f"punch: {e.detail}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
