"""
Portfolio data layer
====================

sqlite3 persistence for portfolio records. The API speaks camelCase
(projectName, clientInvoices, ...); columns are snake_case. List fields
(tag, clientInvoices) are stored as JSON text.
"""

import json
import sqlite3
from datetime import datetime, timezone

from ...core.database import Database
from .dates import parse_date

# camelCase API field -> column
STRING_FIELDS = {
    'projectName': 'project_name',
    'websiteLink': 'website_link',
    'technology': 'technology',
    'category': 'category',
    'industry': 'industry',
    'description': 'description',
    'pageBuilder': 'page_builder',
    'clientName': 'client_name',
    'bidPlatform': 'bid_platform',
    'bidPlatformUrl': 'bid_platform_url',
    'testimonials': 'testimonials',
}
LIST_FIELDS = {
    'tag': 'tag',
    'clientInvoices': 'client_invoices',
}
DATE_FIELDS = {
    'startDate': 'start_date',
    'completionDate': 'completion_date',
}

_SELECT_COLS = '''id, project_name, website_link, technology, category, industry,
                  description, page_builder, client_name, client_invoices,
                  bid_platform, bid_platform_url, invoice_amount, start_date,
                  completion_date, testimonials, tag, created_at, updated_at'''


def name_key(name):
    """Uniqueness key for project names: trimmed and Unicode case-folded"""
    return (name or '').strip().casefold()


class PortfolioError(ValueError):
    """Base class for rejected portfolio writes; status is the HTTP code to answer with."""
    status = 400


class InvalidFormatError(PortfolioError):
    status = 400


class PortfolioValidationError(PortfolioError):
    status = 422


class DuplicateProjectError(PortfolioError):
    status = 409


def init_portfolio_db():
    """Initialize portfolio tables"""
    portfolio_db = Database.portfolio_db()
    Database.ensure_dir(portfolio_db)

    with Database.connect(portfolio_db) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS portfolios (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                project_name TEXT NOT NULL COLLATE NOCASE,
                name_key TEXT NOT NULL,
                website_link TEXT,
                technology TEXT,
                category TEXT,
                industry TEXT,
                description TEXT,
                page_builder TEXT,
                client_name TEXT,
                client_invoices TEXT DEFAULT '[]',
                bid_platform TEXT,
                bid_platform_url TEXT,
                invoice_amount REAL CHECK (invoice_amount IS NULL OR invoice_amount >= 0),
                start_date TEXT,
                completion_date TEXT,
                testimonials TEXT,
                tag TEXT DEFAULT '[]',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_portfolios_category ON portfolios(category)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_portfolios_technology ON portfolios(technology)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_portfolios_industry ON portfolios(industry)')

        cursor.execute('PRAGMA table_info(portfolios)')
        columns = [col[1] for col in cursor.fetchall()]
        if 'name_key' not in columns:
            cursor.execute('ALTER TABLE portfolios ADD COLUMN name_key TEXT')
            cursor.execute('SELECT id, project_name FROM portfolios')
            for portfolio_id, project_name in cursor.fetchall():
                cursor.execute('UPDATE portfolios SET name_key = ? WHERE id = ?',
                               (name_key(project_name), portfolio_id))
        cursor.execute('CREATE UNIQUE INDEX IF NOT EXISTS idx_portfolios_name_key ON portfolios(name_key)')
        conn.commit()


def _load_list(raw):
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return value if isinstance(value, list) else []


def _row_to_dict(row):
    """Convert a DB row to a portfolio dict"""
    return {
        'id': row[0],
        'projectName': row[1],
        'websiteLink': row[2],
        'technology': row[3],
        'category': row[4],
        'industry': row[5],
        'description': row[6],
        'pageBuilder': row[7],
        'clientName': row[8],
        'clientInvoices': _load_list(row[9]),
        'bidPlatform': row[10],
        'bidPlatformUrl': row[11],
        'invoiceAmount': row[12],
        'startDate': row[13],
        'completionDate': row[14],
        'testimonials': row[15],
        'tag': _load_list(row[16]),
        'createdAt': row[17],
        'updatedAt': row[18],
    }


# ===== Payload cleaning =====

def _clean_list(field, value):
    """Accept a list, a JSON encoded list (multipart forms) or a comma separated string."""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith('['):
            try:
                value = json.loads(text)
            except ValueError:
                raise InvalidFormatError(f"{field} must be a list of strings")
        else:
            separator = '|' if field == 'clientInvoices' else ','
            value = text.split(separator)

    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidFormatError(f"{field} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


def _clean_amount(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise InvalidFormatError('invoiceAmount must be a number')
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidFormatError('invoiceAmount must be a number')
    if amount != amount:
        raise InvalidFormatError('invoiceAmount must be a number')
    if amount < 0:
        raise PortfolioValidationError('invoiceAmount must be a non-negative number')
    return amount


def clean_portfolio_payload(data, partial=False):
    """Validate an API payload and return {column: value}.

    With partial=True (updates) absent fields are left out; otherwise
    projectName is required.
    """
    if not isinstance(data, dict):
        raise InvalidFormatError('Request body must be a JSON object')

    data = dict(data)
    if 'tag' not in data and 'tags' in data:
        data['tag'] = data['tags']

    values = {}

    name = data.get('projectName')
    if name is not None and not isinstance(name, str):
        raise InvalidFormatError('projectName must be a string')
    if not partial and (not name or not name.strip()):
        raise PortfolioValidationError('projectName is required')

    for field, column in STRING_FIELDS.items():
        value = data.get(field)
        if value is None:
            continue
        if not isinstance(value, str):
            raise InvalidFormatError(f"{field} must be a string")
        if field == 'projectName' and not value.strip():
            continue
        values[column] = value.strip()

    for field, column in LIST_FIELDS.items():
        if data.get(field) is not None:
            values[column] = json.dumps(_clean_list(field, data[field]))

    for field, column in DATE_FIELDS.items():
        value = data.get(field)
        if value is None or value == '':
            continue
        parsed = parse_date(value)
        if not parsed:
            raise InvalidFormatError(f"{field} must be a valid date")
        values[column] = parsed.isoformat()

    if 'invoiceAmount' in data:
        amount = _clean_amount(data.get('invoiceAmount'))
        if amount is not None or partial:
            values['invoice_amount'] = amount

    if 'project_name' in values:
        values['name_key'] = name_key(values['project_name'])

    start, end = values.get('start_date'), values.get('completion_date')
    if start and end and end < start:
        raise PortfolioValidationError('Completion date cannot be before start date')

    return values


# ===== Queries =====

def list_portfolios(search=None):
    """All portfolios sorted by projectName, case-insensitively"""
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        if search:
            like = f"%{search.strip()}%"
            cursor.execute(f'''
                SELECT {_SELECT_COLS} FROM portfolios
                WHERE project_name LIKE ? OR client_name LIKE ? OR technology LIKE ?
                ORDER BY project_name COLLATE NOCASE ASC
            ''', (like, like, like))
        else:
            cursor.execute(f'''
                SELECT {_SELECT_COLS} FROM portfolios
                ORDER BY project_name COLLATE NOCASE ASC
            ''')
        return [_row_to_dict(row) for row in cursor.fetchall()]


def list_project_names():
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute('SELECT project_name FROM portfolios')
        return [row[0] for row in cursor.fetchall()]


def get_portfolio(portfolio_id):
    """Get single portfolio by ID"""
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'SELECT {_SELECT_COLS} FROM portfolios WHERE id = ?', (portfolio_id,))
        row = cursor.fetchone()
        return _row_to_dict(row) if row else None


def get_portfolios_by_ids(ids):
    if not ids:
        return []
    placeholders = ', '.join('?' for _ in ids)
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'''
            SELECT {_SELECT_COLS} FROM portfolios WHERE id IN ({placeholders})
            ORDER BY project_name COLLATE NOCASE ASC
        ''', list(ids))
        return [_row_to_dict(row) for row in cursor.fetchall()]


def get_portfolios_by_category(category):
    """Newest first"""
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'''
            SELECT {_SELECT_COLS} FROM portfolios WHERE category = ?
            ORDER BY created_at DESC, id DESC
        ''', (category.strip(),))
        return [_row_to_dict(row) for row in cursor.fetchall()]


def _name_taken(cursor, key, exclude_id=None):
    if exclude_id is None:
        cursor.execute('SELECT id FROM portfolios WHERE name_key = ?', (key,))
    else:
        cursor.execute('SELECT id FROM portfolios WHERE name_key = ? AND id != ?', (key, exclude_id))
    return cursor.fetchone() is not None


def create_portfolio(data):
    """Create new portfolio from an API payload and return it"""
    values = clean_portfolio_payload(data)
    now = datetime.now(timezone.utc).isoformat()
    values.setdefault('tag', '[]')
    values.setdefault('client_invoices', '[]')
    values['created_at'] = now
    values['updated_at'] = now

    columns = list(values.keys())
    placeholders = ', '.join('?' for _ in columns)

    try:
        with Database.connect(Database.portfolio_db()) as conn:
            cursor = conn.cursor()
            if _name_taken(cursor, values['name_key']):
                raise DuplicateProjectError('Project with same name already exists')
            cursor.execute(
                f'INSERT INTO portfolios ({", ".join(columns)}) VALUES ({placeholders})',
                [values[c] for c in columns],
            )
            conn.commit()
            portfolio_id = cursor.lastrowid
    except sqlite3.IntegrityError:
        raise DuplicateProjectError('Project with same name already exists')

    return get_portfolio(portfolio_id)


def update_portfolio(portfolio_id, data):
    """Partial update. Returns the updated portfolio, or None if it does not exist."""
    values = clean_portfolio_payload(data, partial=True)
    if not values:
        raise InvalidFormatError('No valid fields to update')

    try:
        with Database.connect(Database.portfolio_db()) as conn:
            cursor = conn.cursor()
            cursor.execute('SELECT start_date, completion_date FROM portfolios WHERE id = ?', (portfolio_id,))
            current = cursor.fetchone()
            if not current:
                return None

            start = values.get('start_date', current[0])
            end = values.get('completion_date', current[1])
            if start and end and end < start:
                raise PortfolioValidationError('Completion date cannot be before start date')

            if 'name_key' in values and _name_taken(cursor, values['name_key'], portfolio_id):
                raise DuplicateProjectError('Project with same name already exists')

            values['updated_at'] = datetime.now(timezone.utc).isoformat()
            set_clause = ', '.join(f'{column} = ?' for column in values)
            cursor.execute(f'UPDATE portfolios SET {set_clause} WHERE id = ?',
                           list(values.values()) + [portfolio_id])
            conn.commit()
    except sqlite3.IntegrityError:
        raise DuplicateProjectError('Project with same name already exists')

    return get_portfolio(portfolio_id)


def delete_portfolio(portfolio_id):
    """Delete portfolio from database"""
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute('DELETE FROM portfolios WHERE id = ?', (portfolio_id,))
        conn.commit()
        return cursor.rowcount > 0


def bulk_delete_portfolios(ids):
    """Delete several portfolios, returns how many rows went away"""
    if not ids:
        return 0
    placeholders = ', '.join('?' for _ in ids)
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'DELETE FROM portfolios WHERE id IN ({placeholders})', list(ids))
        conn.commit()
        return cursor.rowcount


def count_portfolios_with(column, value):
    """Number of portfolios whose column equals value (taxonomy usage counts)"""
    if column not in ('category', 'technology', 'industry'):
        raise ValueError(f"Cannot count by {column}")
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'SELECT COUNT(*) FROM portfolios WHERE {column} = ?', (value,))
        return cursor.fetchone()[0]


def count_portfolios_tagged(tag_name):
    with Database.connect(Database.portfolio_db()) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            SELECT COUNT(*) FROM portfolios
            WHERE EXISTS (SELECT 1 FROM json_each(portfolios.tag) WHERE json_each.value = ?)
        ''', (tag_name,))
        return cursor.fetchone()[0]
