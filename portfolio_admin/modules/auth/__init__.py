"""
Portfolio Admin Auth Module

Provides user authentication functionality including:
- Username/password registration and login
- Signed session tokens (Bearer header or httpOnly cookie)
- Role-based access (admin/user) via route decorators
- User management for admins
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

from . import routes
from .database import UserDatabase
from .session import SessionInfo, decode_token, issue_token
from .utils import login_required, admin_required

__all__ = ['auth_bp', 'UserDatabase', 'SessionInfo', 'decode_token', 'issue_token',
           'login_required', 'admin_required']
