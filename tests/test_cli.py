"""
Flask CLI command tests using app.test_cli_runner().
"""

import os
from datetime import datetime, timedelta

from portfolio_admin.core.database import Database
from portfolio_admin.core.logging_service import LoggingService
from portfolio_admin.modules.auth.database import UserDatabase
from portfolio_admin.modules.portfolio.database import list_portfolios


def test_create_admin(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['create-admin', 'root', '--name', 'Root', '--password', 'Secret123'])

    assert result.exit_code == 0, result.output
    with app.app_context():
        assert UserDatabase.get_user_by_username('root')['role'] == 'admin'


def test_create_admin_weak_password(app):
    result = app.test_cli_runner().invoke(args=['create-admin', 'root', '--password', 'weak'])
    assert result.exit_code != 0


def test_import_and_export_csv(app, tmp_db_dir):
    source = os.path.join(tmp_db_dir, 'in.csv')
    with open(source, 'w', encoding='utf-8') as fh:
        fh.write('Title,Tech\nFoo,React\nfoo,Vue\nBar,Go\n')

    runner = app.test_cli_runner()
    result = runner.invoke(args=['import-csv', source])
    assert result.exit_code == 0, result.output
    assert '2 inserted, 1 skipped' in result.output

    with app.app_context():
        assert [p['projectName'] for p in list_portfolios()] == ['Bar', 'Foo']

    target = os.path.join(tmp_db_dir, 'out.csv')
    result = runner.invoke(args=['export-csv', target])
    assert result.exit_code == 0, result.output
    with open(target, encoding='utf-8-sig') as fh:
        lines = fh.read().splitlines()
    assert lines[0].startswith('Project Name,Technology,')
    assert len(lines) == 3


def test_cleanup_logs(app):
    stale = (datetime.now() - timedelta(days=90)).isoformat()
    with app.app_context():
        LoggingService.info('test', 'fresh entry')
        with Database.connect(Database.analytics_db()) as conn:
            conn.execute(
                "INSERT INTO app_logs (timestamp, level, source, message) VALUES (?, 'INFO', 'test', 'stale entry')",
                (stale,),
            )
            conn.commit()

    result = app.test_cli_runner().invoke(args=['cleanup-logs', '--days', '30'])
    assert result.exit_code == 0, result.output
    assert 'Deleted 1 log entries older than 30 day(s)' in result.output

    with app.app_context():
        messages = [row['message'] for row in LoggingService.get_recent_logs(limit=50)]
    assert 'fresh entry' in messages
    assert 'stale entry' not in messages


def test_cleanup_logs_rejects_negative_days(app):
    result = app.test_cli_runner().invoke(args=['cleanup-logs', '--days', '-1'])
    assert result.exit_code != 0
