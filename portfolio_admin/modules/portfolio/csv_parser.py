"""
CSV parsing for portfolio imports
=================================

A forgiving reader on top of the csv module: quoted fields may hold
commas, "" escapes and newlines, blank lines are skipped, and malformed
quoting never raises, it just yields best-effort boundaries.
"""

import csv
import io

BOM = '\ufeff'

PROJECT_NAME = 'Project Name'
TECHNOLOGY = 'Technology'
REQUIRED_COLUMNS = (PROJECT_NAME, TECHNOLOGY)

# Leading characters a spreadsheet would evaluate as a formula
FORMULA_PREFIXES = ('=', '+', '-', '@', '\t', '\r')

# Canonical column -> accepted header spellings (compared trimmed, case-insensitive)
HEADER_ALIASES = {
    'Project Name': ['project name', 'projectname', 'project', 'project title', 'title', 'name'],
    'Technology': ['technology', 'technologies', 'tech', 'tech stack', 'stack'],
    'Category': ['category', 'categories', 'type'],
    'Industry': ['industry', 'sector'],
    'Description': ['description', 'desc', 'details', 'summary'],
    'Page Builder': ['page builder', 'pagebuilder', 'builder'],
    'Client Name': ['client name', 'clientname', 'client', 'customer'],
    'Website Link': ['website link', 'website', 'url', 'link', 'site', 'live url'],
    'Bid Platform': ['bid platform', 'platform'],
    'Bid Platform URL': ['bid platform url', 'platform url', 'bid url'],
    'Invoice Amount': ['invoice amount', 'amount', 'invoice', 'price', 'budget'],
    'Start Date': ['start date', 'started', 'start'],
    'Completion Date': ['completion date', 'end date', 'completed', 'finish date', 'end'],
    'Testimonials': ['testimonials', 'testimonial', 'review', 'feedback'],
    'Tag': ['tag', 'tags', 'labels'],
    'Client Invoices': ['client invoices', 'invoices', 'invoice urls', 'invoice links'],
}


class CsvRow(dict):
    """Canonical column -> value, plus the file line the record starts on."""

    def __init__(self, values, line_number):
        super().__init__(values)
        self.line_number = line_number


def parse_csv_row(row):
    """Split one CSV record into its field strings."""
    return next(csv.reader([row]), [''])


def unguard_value(value):
    """Undo the quote prefix the exporter puts in front of formula-like cells."""
    if value[:1] == "'" and value[1:2] in FORMULA_PREFIXES:
        return value[1:]
    return value


def _is_blank(fields):
    return not fields or (len(fields) == 1 and not fields[0].strip())


def read_records(text):
    """Yield (line number, fields) for each non-blank record.

    The line number is where the record starts in the file, so a quoted
    field spanning several lines still points at its first line.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    reader = csv.reader(io.StringIO(text, newline=''))
    last_line = 0
    for fields in reader:
        start_line = last_line + 1
        last_line = reader.line_num
        if not _is_blank(fields):
            yield start_line, fields


def normalize_headers(headers):
    """Map column index -> canonical column; unknown headers are left out.

    When two columns resolve to the same canonical name the leftmost one
    wins and the later one is ignored.
    """
    lookup = {}
    for canonical, aliases in HEADER_ALIASES.items():
        lookup[canonical.lower()] = canonical
        for alias in aliases:
            lookup.setdefault(alias.lower(), canonical)

    mapping = {}
    for index, header in enumerate(headers):
        canonical = lookup.get(header.strip().lower())
        if canonical and canonical not in mapping.values():
            mapping[index] = canonical
    return mapping


def missing_required_columns(mapping):
    present = set(mapping.values())
    return [column for column in REQUIRED_COLUMNS if column not in present]


def parse_csv(text):
    """Parse CSV text into (headers, rows, mapping).

    Headers are returned as written in the file. Each row is a CsvRow of
    {canonical column: value} with values trimmed and missing trailing
    cells read as ''. The mapping is {column index: canonical column}.
    """
    records = read_records(text)
    first = next(records, None)
    if first is None:
        return [], [], {}

    headers = [h.strip() for h in first[1]]
    mapping = normalize_headers(headers)

    rows = []
    for line_number, values in records:
        row = CsvRow({canonical: '' for canonical in HEADER_ALIASES}, line_number)
        for index, canonical in mapping.items():
            if index < len(values):
                row[canonical] = unguard_value(values[index].strip())
        rows.append(row)
    return headers, rows, mapping
