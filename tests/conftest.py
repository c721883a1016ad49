"""
Shared fixtures: a fully initialised app on temporary databases, plus
signed-in admin and user tokens.

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

import pytest
from flask import Flask

from portfolio_admin import PortfolioAdmin

ADMIN = {'name': 'Ada Admin', 'username': 'ada', 'password': 'Secret123'}
MEMBER = {'name': 'Uma User', 'username': 'uma', 'password': 'Secret456'}


def make_app(db_dir, config=None):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = db_dir
    app.config["USER_DB"] = os.path.join(db_dir, "users.db")
    app.config["PORTFOLIO_DB"] = os.path.join(db_dir, "portfolio.db")
    app.config["ANALYTICS_DB"] = os.path.join(db_dir, "analytics.db")
    app.config["UPLOAD_FOLDER"] = os.path.join(db_dir, "uploads")
    app.config["S3_BUCKET"] = ""
    PortfolioAdmin(app, config)
    return app


def login(app, username, password):
    """Log in with a throwaway client so the caller's cookie jar stays empty."""
    response = app.test_client().post('/api/auth/login', json={
        'username': username, 'password': password,
    })
    assert response.status_code == 200, response.get_json()
    return response.get_json()['token']


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="portfolio-admin-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    return make_app(tmp_db_dir)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_token(app):
    """The first registered account is the admin."""
    response = app.test_client().post('/api/auth/register', json=ADMIN)
    assert response.status_code == 201, response.get_json()
    return login(app, ADMIN['username'], ADMIN['password'])


@pytest.fixture
def user_token(app, admin_token):
    response = app.test_client().post('/api/auth/register', json=MEMBER)
    assert response.status_code == 201, response.get_json()
    return login(app, MEMBER['username'], MEMBER['password'])


@pytest.fixture
def admin_headers(admin_token):
    return bearer(admin_token)


@pytest.fixture
def user_headers(user_token):
    return bearer(user_token)
