"""
Portfolio Admin - A Flask backend for client project portfolios
===============================================================

A modular admin backend with:
- Username/password auth with admin and user roles
- Portfolio CRUD with CSV import (header aliases, duplicate detection) and export
- Categories, technologies, tags and industries with usage counts
- Public read-only API, file uploads and a health endpoint

Usage:
    from flask import Flask
    from portfolio_admin import PortfolioAdmin

    app = Flask(__name__)
    PortfolioAdmin(app)
"""

import os

from flask import Flask
from flask_cors import CORS

from .core.config import Config

__version__ = '0.1.0'
__author__ = 'Laurence Stephan'

DEFAULT_FEATURES = {
    'auth': True,
    'portfolio': True,
    'taxonomy': True,
    'public': True,
    'uploads': True,
    'ops': True,
}

CONFIG_DEFAULTS = (
    'SECRET_KEY', 'DB_DIR', 'USER_DB', 'PORTFOLIO_DB', 'ANALYTICS_DB',
    'TOKEN_MAX_AGE', 'CORS_ORIGINS', 'UPLOAD_FOLDER', 'MAX_UPLOAD_FILES',
)


class PortfolioAdmin:
    """Flask extension that wires the Portfolio Admin modules into an app.

    ``config`` may contain a ``features`` dict to switch modules off, e.g.
    ``PortfolioAdmin(app, {'features': {'uploads': False}})``.
    """

    def __init__(self, app=None, config=None):
        self._config = config or {}
        self._registered_modules = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key in CONFIG_DEFAULTS:
            if app.config.get(key) is None:
                app.config[key] = getattr(Config, key)

        self._setup_database_dir(app)
        self._init_databases(app)
        self._register_blueprints(app)

        origins = app.config['CORS_ORIGINS']
        if isinstance(origins, str) and origins != '*':
            origins = [o.strip() for o in origins.split(',') if o.strip()]
        CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True)

        from .cli import register_commands
        register_commands(app)

        app.extensions['portfolio_admin'] = self

    @property
    def features(self):
        return {**DEFAULT_FEATURES, **self._config.get('features', {})}

    def get_registered_modules(self):
        return list(self._registered_modules)

    def _setup_database_dir(self, app):
        """Create DB_DIR and the parent folders of every database file"""
        os.makedirs(app.config['DB_DIR'], exist_ok=True)
        for key in ('USER_DB', 'PORTFOLIO_DB', 'ANALYTICS_DB'):
            parent = os.path.dirname(app.config[key])
            if parent:
                os.makedirs(parent, exist_ok=True)

    def _init_databases(self, app):
        from .modules.auth.database import UserDatabase
        from .modules.portfolio.database import init_portfolio_db
        from .modules.taxonomy.database import init_taxonomy_tables

        with app.app_context():
            UserDatabase.init_users_table()
            init_portfolio_db()
            init_taxonomy_tables()

    def _register_blueprints(self, app):
        features = self.features

        if features['auth']:
            from .modules.auth import auth_bp
            app.register_blueprint(auth_bp)
            self._registered_modules.append('auth')

        if features['portfolio']:
            from .modules.portfolio import portfolio_bp
            app.register_blueprint(portfolio_bp)
            self._registered_modules.append('portfolio')

        if features['taxonomy']:
            from .modules.taxonomy import taxonomy_bp
            app.register_blueprint(taxonomy_bp)
            self._registered_modules.append('taxonomy')

        if features['public']:
            from .modules.public import public_bp
            app.register_blueprint(public_bp)
            self._registered_modules.append('public')

        if features['uploads']:
            from .modules.uploads import uploads_bp, uploaded_files_bp
            app.register_blueprint(uploads_bp)
            app.register_blueprint(uploaded_files_bp)
            self._registered_modules.append('uploads')

        if features['ops']:
            from .modules.ops import ops_health_bp, ops_logs_bp
            app.register_blueprint(ops_health_bp)
            app.register_blueprint(ops_logs_bp)
            self._registered_modules.append('ops')


def create_app(config=None, settings=None):
    """Application factory: ``settings`` overrides app.config, ``config`` goes to the extension"""
    app = Flask(__name__)
    app.config.update(settings or {})
    PortfolioAdmin(app, config)
    return app


__all__ = ['PortfolioAdmin', 'create_app', '__version__']
