"""
Ops Routes
==========
"""

from flask import jsonify, request

from . import ops_health_bp, ops_logs_bp
from ..auth.utils import admin_required
from ...core.logging_service import LoggingService

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


# ---------------------------------------------------------------------------
# Public routes (ops_health_bp, no auth)
# ---------------------------------------------------------------------------

@ops_health_bp.route('/')
@ops_health_bp.route('')
def health_check():
    """Public health endpoint for uptime monitors."""
    return jsonify({'status': 'ok'})


# ---------------------------------------------------------------------------
# Admin routes (ops_logs_bp)
# ---------------------------------------------------------------------------

@ops_logs_bp.route('/')
@ops_logs_bp.route('')
@admin_required
def recent_logs():
    """Most recent app_logs entries, optionally filtered by ?level="""
    limit = request.args.get('limit', 100, type=int)
    level = request.args.get('level')
    if level:
        level = level.upper()
        if level not in LOG_LEVELS:
            return jsonify({'message': f'Unknown log level: {level}'}), 400

    logs = LoggingService.get_recent_logs(limit=max(1, min(limit, 500)), level=level)
    return jsonify({'logs': logs, 'count': len(logs)})
