from datetime import datetime

# Tried in order; day-first wins over month-first for ambiguous dd/mm values
DATE_FORMATS = (
    '%Y-%m-%d',
    '%d/%m/%Y',
    '%m/%d/%Y',
    '%d-%m-%Y',
    '%Y/%m/%d',
    '%d.%m.%Y',
    '%d %b %Y',
    '%d %B %Y',
    '%b %d, %Y',
    '%B %d, %Y',
)


def parse_date(value):
    """Parse a user supplied date into a date object, or None if unparseable."""
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None

    # ISO timestamps such as 2024-03-01T00:00:00.000Z
    if len(text) >= 10 and text[4:5] == '-' and text[7:8] == '-':
        try:
            return datetime.strptime(text[:10], '%Y-%m-%d').date()
        except ValueError:
            pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def to_iso_date(value):
    """'' when the value is not a recognisable date"""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else ''


def to_display_date(value):
    """dd/mm/yyyy for exports; unparseable values are returned unchanged"""
    if not value:
        return ''
    parsed = parse_date(value)
    if not parsed:
        return str(value)
    return parsed.strftime('%d/%m/%Y')
