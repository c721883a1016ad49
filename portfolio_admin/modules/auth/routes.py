"""
Auth Routes
===========

Registration, login/logout and user management for the admin dashboard.
Tokens are issued by the session module and returned both in the JSON
body and as an httpOnly cookie.
"""

from flask import request, jsonify, g, current_app

from . import auth_bp
from .database import UserDatabase, UsernameTakenError, ROLES
from .session import TOKEN_COOKIE, issue_token, session_from_request, TokenError
from .utils import validate_password_strength, login_required, admin_required
from ...core.config import get_config_value
from ...core.logging_service import LoggingService

PASSWORD_RULES = 'Password must be at least 8 characters with upper, lower case letters and a digit'


def _payload():
    return request.get_json(silent=True) or request.form.to_dict() or {}


def _set_token_cookie(response, token, max_age):
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=max_age,
        httponly=True,
        samesite='Lax',
        secure=not current_app.debug and not current_app.testing,
        path='/',
    )
    return response


@auth_bp.route('/register', methods=['POST'])
def register():
    """Self-registration. The very first account becomes the admin."""
    data = _payload()
    name = (data.get('name') or '').strip()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not name or not username or not password:
        return jsonify({'message': 'name, username and password are required'}), 400

    if not validate_password_strength(password):
        return jsonify({'message': PASSWORD_RULES}), 400

    if UserDatabase.get_user_by_username(username):
        return jsonify({'message': 'Username already exists'}), 400

    role = 'admin' if UserDatabase.count_users() == 0 else 'user'

    try:
        user = UserDatabase.create_user(name, username, password, role=role)
    except UsernameTakenError as e:
        return jsonify({'message': str(e)}), 400
    except Exception as e:
        LoggingService.log_error_with_traceback('auth', e)
        return jsonify({'message': 'Something went wrong while registering', 'error': str(e)}), 500

    LoggingService.log_user_action('auth', 'register', user_id=str(user['id']), details={'role': role})
    return jsonify({'message': 'User registered successfully', 'user': user}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = _payload()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        return jsonify({'message': 'Username and password are required'}), 401

    try:
        user, reason = UserDatabase.verify_user_credentials(username, password)
    except Exception as e:
        LoggingService.log_error_with_traceback('auth', e)
        return jsonify({'message': 'Something went wrong while logging', 'error': str(e)}), 500

    if not user:
        LoggingService.log_security_event('Failed login', {'username': username, 'reason': reason})
        return jsonify({'message': reason}), 400

    token = issue_token(user)
    LoggingService.log_user_action('auth', 'login', user_id=str(user['id']))

    token_user = {'id': user['id'], 'username': user['username'], 'role': user['role']}
    response = jsonify({'message': 'Login Successfully', 'token': token, 'user': token_user})
    return _set_token_cookie(response, token, int(get_config_value('TOKEN_MAX_AGE', 7200)))


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    response = jsonify({'message': 'Logout Successfully', 'status': True})
    response.delete_cookie(TOKEN_COOKIE, path='/')
    return response


@auth_bp.route('/me', methods=['GET'])
def me():
    """Decoded session for the SPA, so clients never parse tokens themselves"""
    try:
        info = session_from_request()
    except TokenError as e:
        return jsonify({'message': str(e)}), 401
    return jsonify(info.to_dict())


# ===== User management =====

@auth_bp.route('/users', methods=['GET'])
@admin_required
def list_users():
    try:
        return jsonify(UserDatabase.list_users())
    except Exception as e:
        LoggingService.log_error_with_traceback('auth', e)
        return jsonify({'message': 'Something went wrong while fetching users', 'error': str(e)}), 500


@auth_bp.route('/users', methods=['POST'])
@admin_required
def create_user():
    """Admin creates an account and may choose its role"""
    data = _payload()
    name = (data.get('name') or '').strip()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    role = (data.get('role') or 'user').strip()

    if not name or not username or not password:
        return jsonify({'message': 'name, username and password are required'}), 400
    if role not in ROLES:
        return jsonify({'message': f"role must be one of: {', '.join(ROLES)}"}), 400
    if not validate_password_strength(password):
        return jsonify({'message': PASSWORD_RULES}), 400

    try:
        user = UserDatabase.create_user(name, username, password, role=role)
    except UsernameTakenError as e:
        return jsonify({'message': str(e)}), 400
    except Exception as e:
        LoggingService.log_error_with_traceback('auth', e)
        return jsonify({'message': 'Something went wrong while creating user', 'error': str(e)}), 500

    LoggingService.log_user_action('auth', f"create user {username}", details={'role': role})
    return jsonify({'message': 'User created successfully', 'user': user}), 201


@auth_bp.route('/users/<int:user_id>', methods=['GET'])
@login_required
def get_user(user_id):
    if user_id != g.session_info.user_id and not g.session_info.is_admin:
        return jsonify({'message': 'Admin access required'}), 403

    user = UserDatabase.get_user_by_id(user_id)
    if not user:
        return jsonify({'message': 'User not found'}), 404
    return jsonify(user)


@auth_bp.route('/users/<int:user_id>', methods=['PUT'])
@login_required
def update_user(user_id):
    """Users edit their own profile; admins edit anyone and may change roles"""
    info = g.session_info
    if user_id != info.user_id and not info.is_admin:
        return jsonify({'message': 'Admin access required'}), 403

    data = _payload()
    role = data.get('role')
    if role and not info.is_admin:
        return jsonify({'message': 'Only admins can change roles'}), 403

    password = data.get('password') or None
    if password and not validate_password_strength(password):
        return jsonify({'message': PASSWORD_RULES}), 400

    try:
        user = UserDatabase.update_user(
            user_id,
            name=(data.get('name') or '').strip() or None,
            username=(data.get('username') or '').strip() or None,
            password=password,
            role=role,
        )
    except UsernameTakenError as e:
        return jsonify({'message': str(e)}), 400
    except ValueError as e:
        return jsonify({'message': str(e)}), 400
    except Exception as e:
        LoggingService.log_error_with_traceback('auth', e)
        return jsonify({'message': 'Something went wrong while updating user', 'error': str(e)}), 500

    if not user:
        return jsonify({'message': 'User not found'}), 404
    return jsonify({'message': 'User updated successfully', 'user': user})


@auth_bp.route('/users/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    if user_id == g.session_info.user_id:
        return jsonify({'message': 'You cannot delete your own account'}), 400

    try:
        deleted = UserDatabase.delete_user(user_id)
    except Exception as e:
        LoggingService.log_error_with_traceback('auth', e)
        return jsonify({'message': 'Something went wrong while deleting user', 'error': str(e)}), 500

    if not deleted:
        return jsonify({'message': 'User not found'}), 404

    LoggingService.log_user_action('auth', f"delete user {user_id}")
    return jsonify({'message': 'User deleted successfully'})
