"""
Auth and user management tests: registration, login, token handling and
role checks.
"""

import pytest

from portfolio_admin.modules.auth.session import (
    SessionInfo, TokenError, decode_token, issue_token,
)

from conftest import ADMIN, MEMBER, bearer, login


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def test_first_user_becomes_admin(client):
    response = client.post('/api/auth/register', json=ADMIN)
    assert response.status_code == 201
    user = response.get_json()['user']
    assert user['role'] == 'admin'
    assert 'password' not in user and 'password_hash' not in user

    response = client.post('/api/auth/register', json=MEMBER)
    assert response.get_json()['user']['role'] == 'user'


def test_register_requires_all_fields(client):
    response = client.post('/api/auth/register', json={'username': 'x', 'password': 'Secret123'})
    assert response.status_code == 400


def test_register_rejects_weak_password(client):
    response = client.post('/api/auth/register', json={
        'name': 'Weak', 'username': 'weak', 'password': 'password',
    })
    assert response.status_code == 400


def test_register_duplicate_username_case_insensitive(client, admin_token):
    response = client.post('/api/auth/register', json={
        'name': 'Other', 'username': ADMIN['username'].upper(), 'password': 'Secret123',
    })
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Username already exists'


# ---------------------------------------------------------------------------
# Login / logout / me
# ---------------------------------------------------------------------------

def test_login_returns_token_and_cookie(client, admin_token):
    response = client.post('/api/auth/login', json={
        'username': ADMIN['username'], 'password': ADMIN['password'],
    })
    assert response.status_code == 200
    data = response.get_json()
    assert data['message'] == 'Login Successfully'
    assert data['user'] == {'id': 1, 'username': 'ada', 'role': 'admin'}
    assert 'token=' in response.headers.get('Set-Cookie', '')

    # The cookie alone is enough for later requests
    me = client.get('/api/auth/me')
    assert me.status_code == 200
    assert me.get_json()['username'] == 'ada'


def test_login_missing_credentials(client):
    response = client.post('/api/auth/login', json={'username': 'ada'})
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Username and password are required'


def test_login_unknown_user(client):
    response = client.post('/api/auth/login', json={'username': 'ghost', 'password': 'Secret123'})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Username does not exist'


def test_login_wrong_password(client, admin_token):
    response = client.post('/api/auth/login', json={'username': 'ada', 'password': 'Wrong1234'})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Incorrect password'


def test_me_reports_session(client, admin_headers):
    response = client.get('/api/auth/me', headers=admin_headers)
    assert response.status_code == 200
    data = response.get_json()
    assert data['userId'] == 1
    assert data['role'] == 'admin'
    assert data['username'] == 'ada'
    assert data['expiry']


def test_logout_clears_cookie(client, admin_token):
    client.post('/api/auth/login', json={'username': 'ada', 'password': 'Secret123'})
    response = client.post('/api/auth/logout')
    assert response.status_code == 200
    assert client.get('/api/auth/me').status_code == 401


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

def test_token_round_trip(app):
    with app.app_context():
        token = issue_token({'id': 7, 'username': 'kim', 'role': 'user'})
        info = decode_token(token)

    assert isinstance(info, SessionInfo)
    assert info.user_id == 7
    assert info.username == 'kim'
    assert not info.is_admin


def test_missing_token(app):
    with app.app_context():
        with pytest.raises(TokenError, match='Access token required'):
            decode_token('')


def test_expired_token(app):
    with app.app_context():
        token = issue_token({'id': 1, 'username': 'ada', 'role': 'admin'})
        app.config['TOKEN_MAX_AGE'] = -1
        with pytest.raises(TokenError, match='Token has expired. Please login again.'):
            decode_token(token)


def test_token_signed_with_other_secret(app):
    with app.app_context():
        token = issue_token({'id': 1, 'username': 'ada', 'role': 'admin'})
        app.config['SECRET_KEY'] = 'rotated-secret'
        with pytest.raises(TokenError, match='Invalid token format'):
            decode_token(token)


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------

def test_list_users_admin_only(client, admin_headers, user_headers):
    assert client.get('/api/auth/users', headers=user_headers).status_code == 403

    response = client.get('/api/auth/users', headers=admin_headers)
    assert response.status_code == 200
    assert {u['username'] for u in response.get_json()} == {'ada', 'uma'}


def test_admin_creates_user_with_role(app, client, admin_headers):
    response = client.post('/api/auth/users', headers=admin_headers, json={
        'name': 'Second Admin', 'username': 'sam', 'password': 'Secret789', 'role': 'admin',
    })
    assert response.status_code == 201
    assert response.get_json()['user']['role'] == 'admin'

    token = login(app, 'sam', 'Secret789')
    assert client.get('/api/auth/users', headers=bearer(token)).status_code == 200


def test_admin_create_user_rejects_unknown_role(client, admin_headers):
    response = client.post('/api/auth/users', headers=admin_headers, json={
        'name': 'X', 'username': 'x', 'password': 'Secret789', 'role': 'owner',
    })
    assert response.status_code == 400


def test_user_reads_and_updates_self_only(client, user_headers):
    assert client.get('/api/auth/users/2', headers=user_headers).status_code == 200
    assert client.get('/api/auth/users/1', headers=user_headers).status_code == 403

    response = client.put('/api/auth/users/2', headers=user_headers, json={'name': 'Uma U.'})
    assert response.status_code == 200
    assert response.get_json()['user']['name'] == 'Uma U.'
    assert response.get_json()['user']['createdAt'].endswith('+00:00')

    assert client.put('/api/auth/users/1', headers=user_headers,
                      json={'name': 'Hacked'}).status_code == 403


def test_user_cannot_promote_self(client, user_headers):
    response = client.put('/api/auth/users/2', headers=user_headers, json={'role': 'admin'})
    assert response.status_code == 403


def test_update_user_without_fields(client, admin_headers):
    response = client.put('/api/auth/users/1', headers=admin_headers, json={})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'No valid fields to update'


def test_admin_deletes_user_but_not_self(client, admin_headers, user_token):
    assert client.delete('/api/auth/users/1', headers=admin_headers).status_code == 400

    assert client.delete('/api/auth/users/2', headers=admin_headers).status_code == 200
    assert client.delete('/api/auth/users/2', headers=admin_headers).status_code == 404
