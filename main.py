#!/usr/bin/env python3
"""
PeopleDir - Employee directory import service
==============================================

Single-command run:  python main.py
CLI import:          flask --app main import-csv roster.csv

See config.py for all environment-variable tunables.
"""

import logging

import click
from flask import Flask

import config
from db import init_db, get_session
from api import api_bp
from services.employee_store import EmployeeStore


def create_app(db_url: str | None = None) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    app.secret_key = config.SECRET
    # Multipart overhead on top of the CSV itself; the route enforces the real limit
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES + 64 * 1024

    # ── Initialise database ─────────────────────────────────────────
    init_db(db_url or config.DB_URL)

    # ── Register blueprints + CLI ───────────────────────────────────
    app.register_blueprint(api_bp)
    app.cli.add_command(import_csv_command)

    return app


@click.command("import-csv")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--uploaded-by", default=config.DEFAULT_UPLOADER, show_default=True,
              help="Identity recorded on the import job")
@click.option("--role", default="admin", show_default=True,
              type=click.Choice(sorted(config.ALL_ROLES)),
              help="Role the import runs under")
def import_csv_command(file_path, uploaded_by, role):
    """Import employees from a roster CSV file."""
    from import_engine import run_import, ImportNotPermitted

    with open(file_path, "rb") as fh:
        content = fh.read()

    try:
        result = run_import(content, uploaded_by, actor_role=role,
                            source_file_name=click.format_filename(file_path))
    except ImportNotPermitted as exc:
        raise click.ClickException(str(exc))

    _print_report(result.job_id, result.report)
    if result.report.is_fatal:
        raise SystemExit(1)


def _print_report(job_id, report):
    click.echo(f"  Job: {job_id or '-'}")
    for msg in report.fatal_errors:
        click.echo(f"  FATAL: {msg}")
    if report.is_fatal:
        return
    click.echo(f"  Done: {report.created} created, {report.updated} updated, "
               f"{report.unchanged} unchanged, {report.rejected} rejected "
               f"/ {report.total_rows} rows")
    if report.rejected_rows:
        click.echo("  First rejections (max 10):")
        for r in report.rejected_rows[:10]:
            click.echo(f"    Row {r['rowNumber']} ({r['employeeId'] or '?'}): "
                       f"{'; '.join(r['errors'])}")


def _seed_if_empty():
    """Auto-import seed CSV when the employee table is empty."""
    session = get_session()
    try:
        count = EmployeeStore(session).count()
    finally:
        session.close()

    if count > 0:
        print(f"\n  Database has {count} employees.")
        return

    if not config.CSV_SEED_PATH.exists():
        print(f"\n  No seed CSV at {config.CSV_SEED_PATH} - starting empty.")
        return

    print(f"\n  Database empty → auto-importing {config.CSV_SEED_PATH.name} …")
    from import_engine import run_import

    with open(config.CSV_SEED_PATH, "rb") as fh:
        result = run_import(fh.read(), config.DEFAULT_UPLOADER, actor_role="admin",
                            source_file_name=config.CSV_SEED_PATH.name)

    _print_report(result.job_id, result.report)


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 56)
    print("  PeopleDir - Employee Import Service")
    print("=" * 56)

    app = create_app()
    print(f"  Database: {config.DB_URL}")
    _seed_if_empty()

    print(f"\n  http://{config.HOST}:{config.PORT}/api/v1/health")
    print("=" * 56)

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
