from functools import wraps

from flask import g, jsonify

from ...core.logging_service import LoggingService
from .session import TokenError, session_from_request


def validate_password_strength(password):
    """Validate password meets security requirements"""
    if len(password) < 8:
        return False

    has_upper = any(c.isupper() for c in password)
    has_lower = any(c.islower() for c in password)
    has_digit = any(c.isdigit() for c in password)

    return has_upper and has_lower and has_digit


def login_required(f):
    """Decorator to require a valid auth token; exposes it as g.session_info"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            g.session_info = session_from_request()
        except TokenError as e:
            return jsonify({'message': str(e)}), 401
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require an admin auth token"""
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not g.session_info.is_admin:
            LoggingService.log_security_event(
                'Admin route refused',
                {'username': g.session_info.username, 'endpoint': f.__name__},
            )
            return jsonify({'message': 'Admin access required'}), 403
        return f(*args, **kwargs)
    return decorated_function
