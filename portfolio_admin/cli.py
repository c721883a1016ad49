"""Flask CLI commands for Portfolio Admin."""

import click

from .core.logging_service import LoggingService


def register_commands(app):
    """Register CLI commands on the Flask app."""

    @app.cli.command("create-admin")
    @click.argument("username")
    @click.option("--name", default=None, help="Display name (defaults to the username)")
    @click.password_option("--password", help="Password for the new admin")
    def create_admin(username, name, password):
        """Create an admin account."""
        from .modules.auth.database import UserDatabase, UsernameTakenError
        from .modules.auth.utils import validate_password_strength

        if not validate_password_strength(password):
            raise click.ClickException(
                "Password must be at least 8 characters with upper, lower case letters and a digit"
            )
        try:
            user = UserDatabase.create_user(name or username, username, password, role='admin')
        except UsernameTakenError as e:
            raise click.ClickException(str(e))

        LoggingService.info('cli', f"Admin account created: {user['username']}")
        click.echo(f"Admin '{user['username']}' created (id {user['id']}).")

    @app.cli.command("import-csv")
    @click.argument("csv_file", type=click.File("r", encoding="utf-8-sig"))
    @click.option("--remote", default=None, help="Base URL of another Portfolio Admin server")
    @click.option("--token", default=None, envvar="PORTFOLIO_ADMIN_TOKEN",
                  help="Bearer token for --remote")
    def import_csv(csv_file, remote, token):
        """Import portfolios from CSV_FILE into this app or a remote server."""
        from .modules.portfolio.importer import PortfolioImporter
        from .modules.portfolio.store import LocalPortfolioStore, RemotePortfolioStore

        store = RemotePortfolioStore(remote, token=token) if remote else LocalPortfolioStore()
        outcome = PortfolioImporter(store).run(csv_file.read())

        for item in outcome.inserted:
            click.echo(f"  + {item.projectName}")
        for item in outcome.skipped:
            click.echo(f"  - {item.projectName}: {item.reason}")
        click.echo(outcome.summary())

    @app.cli.command("export-csv")
    @click.argument("output", type=click.Path(dir_okay=False, writable=True))
    def export_csv(output):
        """Write every portfolio to OUTPUT as CSV."""
        from .modules.portfolio.database import list_portfolios
        from .modules.portfolio.exporter import export_portfolios

        records = list_portfolios()
        with open(output, "w", encoding="utf-8", newline="") as fh:
            fh.write(export_portfolios(records))
        click.echo(f"Exported {len(records)} portfolio(s) to {output}")

    @app.cli.command("cleanup-logs")
    @click.option("--days", default=30, show_default=True, type=click.IntRange(min=0),
                  help="Keep log entries newer than this many days")
    def cleanup_logs(days):
        """Delete application log entries older than --days."""
        deleted = LoggingService.cleanup_old_logs(days_to_keep=days)
        click.echo(f"Deleted {deleted} log entries older than {days} day(s)")
