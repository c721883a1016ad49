import sqlite3
from datetime import datetime, timezone

from werkzeug.security import generate_password_hash, check_password_hash

from ...core.database import Database

ROLES = ('admin', 'user')

_PUBLIC_COLS = 'id, name, username, role, created_at, updated_at'


class UsernameTakenError(ValueError):
    """Raised when a username is already registered."""


def _to_public(row):
    """Convert a DB row to the user dict exposed by the API (no password hash)."""
    return {
        'id': row[0],
        'name': row[1],
        'username': row[2],
        'role': row[3],
        'createdAt': row[4],
        'updatedAt': row[5],
    }


class UserDatabase:
    @staticmethod
    def _get_connection():
        """Get database connection"""
        return Database.connect(Database.user_db())

    @staticmethod
    def init_users_table():
        """Initialize the users table with proper schema"""
        Database.ensure_dir(Database.user_db())
        with UserDatabase._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    username TEXT NOT NULL UNIQUE COLLATE NOCASE,
                    password_hash TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'user',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_users_username ON users(username)")
            conn.commit()

    @staticmethod
    def count_users():
        with UserDatabase._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM users")
            return cursor.fetchone()[0]

    @staticmethod
    def get_user_by_id(user_id):
        """Get user by ID"""
        with UserDatabase._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_PUBLIC_COLS} FROM users WHERE id = ?", (user_id,))
            row = cursor.fetchone()
            return _to_public(row) if row else None

    @staticmethod
    def get_user_by_username(username):
        """Get user by username (case-insensitive)"""
        with UserDatabase._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_PUBLIC_COLS} FROM users WHERE username = ?", (username.strip(),))
            row = cursor.fetchone()
            return _to_public(row) if row else None

    @staticmethod
    def list_users():
        with UserDatabase._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_PUBLIC_COLS} FROM users ORDER BY created_at DESC, id DESC")
            return [_to_public(row) for row in cursor.fetchall()]

    @staticmethod
    def create_user(name, username, password, role='user'):
        """Create a new user and return its public dict"""
        if role not in ROLES:
            raise ValueError(f"role must be one of: {', '.join(ROLES)}")

        now = datetime.now(timezone.utc).isoformat()
        try:
            with UserDatabase._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO users (name, username, password_hash, role, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (name.strip(), username.strip(), generate_password_hash(password), role, now, now))
                conn.commit()
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError:
            raise UsernameTakenError('Username already exists')

        return UserDatabase.get_user_by_id(user_id)

    @staticmethod
    def verify_user_credentials(username, password):
        """Return (user, reason). reason is set when the login must be refused."""
        with UserDatabase._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_PUBLIC_COLS}, password_hash FROM users WHERE username = ?",
                           (username.strip(),))
            row = cursor.fetchone()

        if not row:
            return None, 'Username does not exist'
        if not check_password_hash(row[6], password):
            return None, 'Incorrect password'
        return _to_public(row), None

    @staticmethod
    def update_user(user_id, name=None, username=None, password=None, role=None):
        """Update the given fields. Returns the updated user or None if not found."""
        set_clauses = []
        values = []

        if name:
            set_clauses.append("name = ?")
            values.append(name.strip())
        if username:
            set_clauses.append("username = ?")
            values.append(username.strip())
        if password:
            set_clauses.append("password_hash = ?")
            values.append(generate_password_hash(password))
        if role:
            if role not in ROLES:
                raise ValueError(f"role must be one of: {', '.join(ROLES)}")
            set_clauses.append("role = ?")
            values.append(role)

        if not set_clauses:
            raise ValueError('No valid fields to update')

        set_clauses.append("updated_at = ?")
        values.append(datetime.now(timezone.utc).isoformat())
        values.append(user_id)

        try:
            with UserDatabase._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"UPDATE users SET {', '.join(set_clauses)} WHERE id = ?", values)
                conn.commit()
                if cursor.rowcount == 0:
                    return None
        except sqlite3.IntegrityError:
            raise UsernameTakenError('Username already exists')

        return UserDatabase.get_user_by_id(user_id)

    @staticmethod
    def delete_user(user_id):
        with UserDatabase._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM users WHERE id = ?", (user_id,))
            conn.commit()
            return cursor.rowcount > 0
