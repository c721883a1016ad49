"""
Portfolio CSV import
====================

parse -> normalize headers -> validate -> dedupe -> persist -> report.

Duplicates are decided for the whole batch before anything is written, so
the first occurrence in file order always wins. Rows are then created one
at a time; a failed create is recorded and the batch carries on.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .csv_parser import PROJECT_NAME, TECHNOLOGY, missing_required_columns, parse_csv
from .database import name_key
from .dates import to_iso_date
from .store import PortfolioStoreError

logger = logging.getLogger(__name__)

ALREADY_EXISTS = 'Already exists'

STATUS_REASONS = {
    400: 'Invalid data format',
    409: 'Project already exists',
    422: 'Validation error',
}


@dataclass
class ImportResultItem:
    projectName: str
    reason: Optional[str] = None

    def to_dict(self):
        item = {'projectName': self.projectName}
        if self.reason is not None:
            item['reason'] = self.reason
        return item


@dataclass
class ImportOutcome:
    inserted: List[ImportResultItem] = field(default_factory=list)
    skipped: List[ImportResultItem] = field(default_factory=list)

    def to_dict(self):
        return {
            'inserted': [item.to_dict() for item in self.inserted],
            'skipped': [item.to_dict() for item in self.skipped],
        }

    def summary(self):
        return f"{len(self.inserted)} inserted, {len(self.skipped)} skipped"


class DuplicateDetector:
    """Tracks names already in storage plus names accepted earlier in the batch."""

    def __init__(self, existing_names):
        self.existing = {name_key(n) for n in existing_names if name_key(n)}
        self.seen = set()

    def is_duplicate(self, name):
        key = name_key(name)
        return key in self.existing or key in self.seen

    def accept(self, name):
        self.seen.add(name_key(name))


def classify_store_error(error):
    """Human readable reason for a failed create."""
    if error.status is None:
        return 'Network error'
    if error.status in STATUS_REASONS:
        return STATUS_REASONS[error.status]
    return error.message or 'Failed to create project'


def _split(value, separator):
    return [part.strip() for part in value.split(separator) if part.strip()] if value else []


def _parse_amount(value):
    if not value:
        return None
    try:
        return float(value.replace(',', '').strip())
    except ValueError:
        return None


def build_create_request(row):
    """Turn a normalized CSV row into the payload of a create call."""
    payload = {
        'projectName': row['Project Name'],
        'technology': row['Technology'],
        'category': row['Category'],
        'industry': row['Industry'],
        'description': row['Description'],
        'pageBuilder': row['Page Builder'],
        'clientName': row['Client Name'],
        'websiteLink': row['Website Link'],
        'bidPlatform': row['Bid Platform'],
        'bidPlatformUrl': row['Bid Platform URL'],
        'testimonials': row['Testimonials'],
        'tag': _split(row['Tag'], ','),
        'clientInvoices': _split(row['Client Invoices'], '|'),
    }

    amount = _parse_amount(row['Invoice Amount'])
    if amount is not None:
        payload['invoiceAmount'] = amount

    start_date = to_iso_date(row['Start Date'])
    if start_date:
        payload['startDate'] = start_date
    completion_date = to_iso_date(row['Completion Date'])
    if completion_date:
        payload['completionDate'] = completion_date

    return payload


class PortfolioImporter:
    """Runs one import against a record-storage service (local or remote)."""

    def __init__(self, store):
        self.store = store

    def run(self, text):
        outcome = ImportOutcome()

        headers, rows, mapping = parse_csv(text or '')
        if not headers:
            outcome.skipped.append(ImportResultItem('', 'CSV file is empty'))
            return outcome

        missing = missing_required_columns(mapping)
        if missing:
            outcome.skipped.append(ImportResultItem(
                '', f"Missing required columns: {', '.join(missing)}"
            ))
            return outcome

        if not rows:
            outcome.skipped.append(ImportResultItem('', 'No data rows found in CSV'))
            return outcome

        try:
            existing_names = self.store.list_project_names()
        except PortfolioStoreError as e:
            outcome.skipped.append(ImportResultItem(
                '', f"Could not load existing projects: {classify_store_error(e)}"
            ))
            return outcome

        detector = DuplicateDetector(existing_names)
        to_create = []

        for row in rows:
            name = row[PROJECT_NAME]
            if not name:
                outcome.skipped.append(ImportResultItem(
                    f"Row {row.line_number}", f"Missing required field: {PROJECT_NAME}"
                ))
                continue
            if not row[TECHNOLOGY]:
                outcome.skipped.append(ImportResultItem(
                    name, f"Missing required field: {TECHNOLOGY}"
                ))
                continue
            if detector.is_duplicate(name):
                outcome.skipped.append(ImportResultItem(name, ALREADY_EXISTS))
                continue
            detector.accept(name)
            to_create.append(row)

        for row in to_create:
            name = row[PROJECT_NAME]
            try:
                self.store.create(build_create_request(row))
            except PortfolioStoreError as e:
                reason = classify_store_error(e)
                logger.info("Import skipped %r: %s (%s)", name, reason, e.message)
                outcome.skipped.append(ImportResultItem(name, reason))
                continue
            outcome.inserted.append(ImportResultItem(name))

        return outcome
