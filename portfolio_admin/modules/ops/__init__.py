"""
Ops Module
==========

Public /health endpoint for uptime monitors and an admin-only
feed of recent application log entries.

Usage:
    from portfolio_admin.modules.ops import ops_health_bp, ops_logs_bp

    app.register_blueprint(ops_health_bp)  # Registers at /health
    app.register_blueprint(ops_logs_bp)    # Registers at /api/logs
"""

from flask import Blueprint

# Public health endpoint (no auth, for uptime monitors)
ops_health_bp = Blueprint(
    'ops_health',
    __name__,
    url_prefix='/health'
)

# Admin log feed
ops_logs_bp = Blueprint(
    'ops_logs',
    __name__,
    url_prefix='/api/logs'
)

from . import routes

__all__ = ['ops_health_bp', 'ops_logs_bp']
