"""
Portfolio CSV export
====================

One fixed header row, one row per record. Text is flattened onto one line
and truncated per column so the file opens cleanly in spreadsheet tools,
and cells that look like formulas are prefixed with a quote.
"""

import csv
import io
import logging
import re

from .csv_parser import BOM, FORMULA_PREFIXES
from .dates import to_display_date

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    'Project Name',
    'Technology',
    'Category',
    'Industry',
    'Description',
    'Page Builder',
    'Client Name',
    'Website Link',
    'Bid Platform',
    'Bid Platform URL',
    'Invoice Amount',
    'Start Date',
    'Completion Date',
    'Testimonials',
    'Tag',
    'Client Invoices',
]

MAX_LENGTHS = {
    'Project Name': 50,
    'Technology': 100,
    'Category': 50,
    'Industry': 50,
    'Description': 200,
    'Page Builder': 50,
    'Client Name': 100,
    'Website Link': 200,
    'Bid Platform': 50,
    'Bid Platform URL': 200,
    'Testimonials': 150,
    'Tag': 150,
    'Client Invoices': 500,
}

IMAGE_MARKER = 'data:image'
IMAGE_PLACEHOLDER = '[IMAGE]'
ELLIPSIS = '...'

_WHITESPACE = re.compile(r'\s+')


def sanitize_text(value, max_length=None):
    """Collapse whitespace, hide inline images and truncate."""
    if value is None:
        return ''
    text = _WHITESPACE.sub(' ', str(value)).strip()
    if text.startswith(IMAGE_MARKER):
        return IMAGE_PLACEHOLDER
    if max_length and len(text) > max_length:
        text = text[:max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS
    return text


def join_list(value, separator):
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return separator.join(str(v) for v in value if v is not None and str(v).strip())
    return str(value)


def format_amount(value):
    if value is None or value == '':
        return ''
    amount = float(value)
    if amount.is_integer():
        return str(int(amount))
    return repr(amount)


def sanitize_csv_value(value):
    """Prefix a quote so spreadsheet tools show the cell as text, not a formula."""
    if isinstance(value, str) and value and value[0] in FORMULA_PREFIXES:
        return "'" + value
    return value


def record_to_row(record):
    """Map a portfolio dict to the export columns, in header order."""
    raw = {
        'Project Name': record.get('projectName'),
        'Technology': join_list(record.get('technology'), ', '),
        'Category': record.get('category'),
        'Industry': record.get('industry'),
        'Description': record.get('description'),
        'Page Builder': record.get('pageBuilder'),
        'Client Name': record.get('clientName'),
        'Website Link': record.get('websiteLink'),
        'Bid Platform': record.get('bidPlatform'),
        'Bid Platform URL': record.get('bidPlatformUrl'),
        'Tag': join_list(record.get('tag'), ', '),
        'Client Invoices': join_list(record.get('clientInvoices'), ' | '),
        'Testimonials': record.get('testimonials'),
    }

    row = []
    for header in EXPORT_HEADERS:
        if header == 'Invoice Amount':
            row.append(format_amount(record.get('invoiceAmount')))
        elif header == 'Start Date':
            row.append(to_display_date(record.get('startDate')))
        elif header == 'Completion Date':
            row.append(to_display_date(record.get('completionDate')))
        else:
            row.append(sanitize_text(raw[header], MAX_LENGTHS.get(header)))
    return row


def export_portfolios(records):
    """Serialize records to BOM-prefixed CSV text.

    A record that cannot be serialized becomes a row of "ERROR" cells so one
    bad record never loses the rest of the export.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(EXPORT_HEADERS)

    for record in records:
        try:
            row = record_to_row(record)
        except Exception as e:
            logger.warning("Export failed for record %r: %s",
                           record.get('id') if isinstance(record, dict) else record, e)
            row = ['ERROR'] * len(EXPORT_HEADERS)
        writer.writerow([sanitize_csv_value(value) for value in row])

    return BOM + output.getvalue()
