"""
Session tokens
==============

The single place where auth tokens are issued and decoded. Every route,
the CLI and the tests read the signed-in user through ``SessionInfo``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from flask import request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ...core.config import get_config_value

TOKEN_SALT = 'portfolio-admin-auth'
TOKEN_COOKIE = 'token'


@dataclass(frozen=True)
class SessionInfo:
    user_id: int
    role: str
    username: str
    expiry: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'

    def to_dict(self) -> dict:
        return {
            'userId': self.user_id,
            'role': self.role,
            'username': self.username,
            'expiry': self.expiry.isoformat(),
        }


class TokenError(Exception):
    """Raised when a token is missing or cannot be trusted."""


def _serializer():
    return URLSafeTimedSerializer(get_config_value('SECRET_KEY'), salt=TOKEN_SALT)


def _max_age() -> int:
    return int(get_config_value('TOKEN_MAX_AGE', 7200))


def issue_token(user: dict) -> str:
    """Sign a token for a user dict with id, username and role."""
    expiry = datetime.now(timezone.utc) + timedelta(seconds=_max_age())
    payload = {
        'id': user['id'],
        'username': user['username'],
        'role': user['role'],
        'exp': int(expiry.timestamp()),
    }
    return _serializer().dumps(payload)


def decode_token(token: str) -> SessionInfo:
    """Verify a token and return its SessionInfo, raising TokenError otherwise."""
    if not token:
        raise TokenError('Access token required')

    try:
        payload = _serializer().loads(token, max_age=_max_age())
    except SignatureExpired:
        raise TokenError('Token has expired. Please login again.')
    except BadSignature:
        raise TokenError('Invalid token format. Please login again.')

    try:
        return SessionInfo(
            user_id=int(payload['id']),
            role=payload['role'],
            username=payload['username'],
            expiry=datetime.fromtimestamp(payload['exp'], tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError):
        raise TokenError('Invalid token')


def token_from_request() -> Optional[str]:
    """Bearer header first, then the httpOnly cookie set at login."""
    auth_header = request.headers.get('Authorization', '')
    if auth_header.lower().startswith('bearer '):
        return auth_header.split(' ', 1)[1].strip()
    return request.cookies.get(TOKEN_COOKIE)


def session_from_request() -> SessionInfo:
    return decode_token(token_from_request())
