"""
Critical Integration Tests for Portfolio Admin
==============================================

Focused tests covering the integration points most likely to break.
Run with: pytest tests/test_critical.py -v
"""

import os
import shutil
import tempfile

from flask import Flask

from portfolio_admin import PortfolioAdmin, create_app

from conftest import make_app


# ---------------------------------------------------------------------------
# 1. Extension initialisation -- PortfolioAdmin(app) does not raise
# ---------------------------------------------------------------------------

def test_extension_initialisation(tmp_db_dir):
    """PortfolioAdmin(app) boots without errors and stores itself on the app."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["DB_DIR"] = tmp_db_dir
    app.config["USER_DB"] = os.path.join(tmp_db_dir, "users.db")
    app.config["PORTFOLIO_DB"] = os.path.join(tmp_db_dir, "portfolio.db")
    app.config["ANALYTICS_DB"] = os.path.join(tmp_db_dir, "analytics.db")

    admin = PortfolioAdmin(app)

    assert "portfolio_admin" in app.extensions
    assert app.extensions["portfolio_admin"] is admin
    assert app.config["SECRET_KEY"], "SECRET_KEY falls back to Config"
    assert app.config["TOKEN_MAX_AGE"] == 7200


# ---------------------------------------------------------------------------
# 2. Config resolution -- DB paths are non-empty and contain expected names
# ---------------------------------------------------------------------------

def test_config_db_paths(app):
    assert app.config["DB_DIR"], "DB_DIR must not be empty"
    assert "users.db" in app.config["USER_DB"]
    assert "portfolio.db" in app.config["PORTFOLIO_DB"]
    assert "analytics.db" in app.config["ANALYTICS_DB"]


def test_config_value_prefers_app_config(app):
    from portfolio_admin.core.config import get_config_value

    with app.app_context():
        assert get_config_value("PORTFOLIO_DB") == app.config["PORTFOLIO_DB"]
    assert get_config_value("DOES_NOT_EXIST", "fallback") == "fallback"


# ---------------------------------------------------------------------------
# 3. Blueprint registration -- every module is registered by default
# ---------------------------------------------------------------------------

EXPECTED_MODULES = ["auth", "portfolio", "taxonomy", "public", "uploads", "ops"]


def test_all_blueprints_registered(app):
    registered = app.extensions["portfolio_admin"].get_registered_modules()

    for mod in EXPECTED_MODULES:
        assert mod in registered, (
            f"Module '{mod}' was not registered. Registered: {registered}"
        )
    assert len(registered) == len(EXPECTED_MODULES)


def test_feature_flags_disable_modules(tmp_db_dir):
    app = make_app(tmp_db_dir, {'features': {'uploads': False, 'public': False}})
    registered = app.extensions["portfolio_admin"].get_registered_modules()

    assert "uploads" not in registered
    assert "public" not in registered
    rules = [rule.rule for rule in app.url_map.iter_rules()]
    assert "/api/upload" not in rules


def test_expected_routes_exist(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    for rule in ("/api/auth/login", "/api/portfolios", "/api/portfolios/import",
                 "/api/portfolios/export", "/api/portfolios/bulk-delete",
                 "/api/upload", "/api/logs", "/health"):
        assert rule in rules, f"{rule} missing. Routes: {sorted(rules)}"


# ---------------------------------------------------------------------------
# 4. Database directory creation -- _setup_database_dir creates the dir
# ---------------------------------------------------------------------------

def test_database_dir_creation():
    d = tempfile.mkdtemp(prefix="portfolio-admin-dbtest-")
    target = os.path.join(d, "sub", "databases")

    try:
        make_app(target)
        assert os.path.isdir(target), f"DB_DIR was not created at {target}"
        assert os.path.exists(os.path.join(target, "portfolio.db"))
        assert os.path.exists(os.path.join(target, "users.db"))
    finally:
        shutil.rmtree(d, ignore_errors=True)


def test_create_app_factory(tmp_db_dir):
    app = create_app(settings={
        "TESTING": True,
        "SECRET_KEY": "factory-secret",
        "DB_DIR": tmp_db_dir,
        "USER_DB": os.path.join(tmp_db_dir, "users.db"),
        "PORTFOLIO_DB": os.path.join(tmp_db_dir, "portfolio.db"),
        "ANALYTICS_DB": os.path.join(tmp_db_dir, "analytics.db"),
    })
    assert app.config["SECRET_KEY"] == "factory-secret"
    assert "portfolio_admin" in app.extensions


# ---------------------------------------------------------------------------
# 5. Auth guard -- unauthenticated API calls are refused
# ---------------------------------------------------------------------------

def test_portfolios_require_token(client):
    response = client.get("/api/portfolios")
    assert response.status_code == 401
    assert response.get_json()["message"] == "Access token required"


def test_invalid_token_rejected(client):
    response = client.get("/api/portfolios", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid token format. Please login again."


# ---------------------------------------------------------------------------
# 6. Health endpoint -- GET /health returns {"status": "ok"}
# ---------------------------------------------------------------------------

def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# 7. Admin logs -- admin only, and they contain recorded actions
# ---------------------------------------------------------------------------

def test_logs_admin_only(client, user_headers):
    response = client.get("/api/logs", headers=user_headers)
    assert response.status_code == 403


def test_logs_list_recent_actions(client, admin_headers):
    client.post("/api/portfolios", json={"projectName": "Logged", "technology": "Flask"},
                headers=admin_headers)

    response = client.get("/api/logs?limit=50", headers=admin_headers)
    assert response.status_code == 200
    data = response.get_json()
    assert data["count"] == len(data["logs"])
    assert any("create Logged" in entry["message"] for entry in data["logs"])


def test_logs_unknown_level(client, admin_headers):
    response = client.get("/api/logs?level=loud", headers=admin_headers)
    assert response.status_code == 400


# ---------------------------------------------------------------------------
# 8. CORS -- API responses carry CORS headers for the SPA
# ---------------------------------------------------------------------------

def test_cors_headers_on_api(client):
    response = client.get("/api/public/portfolios", headers={"Origin": "http://localhost:5173"})
    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") == "http://localhost:5173"
    assert response.headers.get("Access-Control-Allow-Credentials") == "true"
