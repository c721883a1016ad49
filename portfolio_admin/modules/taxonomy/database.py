"""
Taxonomy data layer
===================

Categories, technologies, tags and industries share one table shape:
a unique name plus optional extra text columns. Usage counts are
computed from the portfolios table on read.
"""

import sqlite3
from datetime import datetime, timezone

from ...core.database import Database
from ..portfolio.database import count_portfolios_with, count_portfolios_tagged, name_key

# kind -> (table, singular label, extra columns, portfolio column counted)
TAXONOMIES = {
    'categories': ('categories', 'Category', (), 'category'),
    'technologies': ('technologies', 'Technology', ('description', 'category', 'icon'), 'technology'),
    'tags': ('tags', 'Tag', (), None),
    'industries': ('industries', 'Industry', (), 'industry'),
}


class TaxonomyError(ValueError):
    status = 400


class DuplicateNameError(TaxonomyError):
    status = 409


def label(kind):
    return TAXONOMIES[kind][1]


def init_taxonomy_tables():
    portfolio_db = Database.portfolio_db()
    Database.ensure_dir(portfolio_db)

    with Database.connect(portfolio_db) as conn:
        cursor = conn.cursor()
        for table, _, extra, _ in TAXONOMIES.values():
            extra_cols = ''.join(f', {column} TEXT' for column in extra)
            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL COLLATE NOCASE,
                    name_key TEXT NOT NULL{extra_cols},
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            cursor.execute(f'PRAGMA table_info({table})')
            if 'name_key' not in [col[1] for col in cursor.fetchall()]:
                cursor.execute(f'ALTER TABLE {table} ADD COLUMN name_key TEXT')
                cursor.execute(f'SELECT id, name FROM {table}')
                for entry_id, name in cursor.fetchall():
                    cursor.execute(f'UPDATE {table} SET name_key = ? WHERE id = ?',
                                   (name_key(name), entry_id))
            cursor.execute(f'CREATE UNIQUE INDEX IF NOT EXISTS idx_{table}_name_key ON {table}(name_key)')
        conn.commit()


def _columns(kind):
    _, _, extra, _ = TAXONOMIES[kind]
    return ['id', 'name', *extra, 'created_at', 'updated_at']


def _row_to_dict(kind, row):
    entry = {}
    for column, value in zip(_columns(kind), row):
        if column == 'created_at':
            entry['createdAt'] = value
        elif column == 'updated_at':
            entry['updatedAt'] = value
        else:
            entry[column] = value
    return entry


def _with_count(kind, entry):
    counted_column = TAXONOMIES[kind][3]
    if counted_column:
        entry['count'] = count_portfolios_with(counted_column, entry['name'])
    else:
        entry['count'] = count_portfolios_tagged(entry['name'])
    return entry


def list_entries(kind):
    """Categories are alphabetical, everything else newest first"""
    table = TAXONOMIES[kind][0]
    order = 'name COLLATE NOCASE ASC' if kind == 'categories' else 'created_at DESC, id DESC'
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'SELECT {", ".join(_columns(kind))} FROM {table} ORDER BY {order}')
        rows = cursor.fetchall()
    return [_with_count(kind, _row_to_dict(kind, row)) for row in rows]


def get_entry(kind, entry_id):
    table = TAXONOMIES[kind][0]
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'SELECT {", ".join(_columns(kind))} FROM {table} WHERE id = ?', (entry_id,))
        row = cursor.fetchone()
    return _with_count(kind, _row_to_dict(kind, row)) if row else None


def _clean(kind, data, require_name):
    if not isinstance(data, dict):
        raise TaxonomyError('Request body must be a JSON object')

    values = {}
    name = data.get('name')
    if name is not None and not isinstance(name, str):
        raise TaxonomyError('name must be a string')
    if name and name.strip():
        values['name'] = name.strip()
        values['name_key'] = name_key(name)
    elif require_name:
        raise TaxonomyError(f"{label(kind)} name is required")

    for column in TAXONOMIES[kind][2]:
        value = data.get(column)
        if value is None:
            continue
        if not isinstance(value, str):
            raise TaxonomyError(f"{column} must be a string")
        values[column] = value.strip()
    return values


def create_entry(kind, data):
    table, singular, _, _ = TAXONOMIES[kind]
    values = _clean(kind, data, require_name=True)
    now = datetime.now(timezone.utc).isoformat()
    values['created_at'] = now
    values['updated_at'] = now

    columns = list(values)
    try:
        with Database.connect(Database.portfolio_db()) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f'INSERT INTO {table} ({", ".join(columns)}) VALUES ({", ".join("?" for _ in columns)})',
                [values[c] for c in columns],
            )
            conn.commit()
            entry_id = cursor.lastrowid
    except sqlite3.IntegrityError:
        raise DuplicateNameError(f'{singular} "{values["name"]}" already exists')

    return get_entry(kind, entry_id)


def update_entry(kind, entry_id, data):
    """Returns the updated entry, or None if it does not exist"""
    table, singular, _, _ = TAXONOMIES[kind]
    values = _clean(kind, data, require_name=False)
    if not values:
        raise TaxonomyError('No valid fields to update')

    values['updated_at'] = datetime.now(timezone.utc).isoformat()
    try:
        with Database.connect(Database.portfolio_db()) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f'UPDATE {table} SET {", ".join(f"{c} = ?" for c in values)} WHERE id = ?',
                list(values.values()) + [entry_id],
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
    except sqlite3.IntegrityError:
        raise DuplicateNameError(f'{singular} "{values["name"]}" already exists')

    return get_entry(kind, entry_id)


def delete_entry(kind, entry_id):
    table = TAXONOMIES[kind][0]
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'DELETE FROM {table} WHERE id = ?', (entry_id,))
        conn.commit()
        return cursor.rowcount > 0
