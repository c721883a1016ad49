"""
CSV export tests: header layout, flattening, truncation and the
export -> import round trip.
"""

from portfolio_admin.modules.portfolio.csv_parser import BOM, parse_csv
from portfolio_admin.modules.portfolio.exporter import (
    EXPORT_HEADERS,
    export_portfolios,
    format_amount,
    record_to_row,
    sanitize_csv_value,
    sanitize_text,
)
from portfolio_admin.modules.portfolio.importer import PortfolioImporter

from test_importer import FakeStore

RECORD = {
    'id': 1,
    'projectName': 'Acme Shop',
    'technology': 'Shopify',
    'category': 'E-commerce',
    'industry': 'Retail',
    'description': 'A storefront\nwith "custom" checkout',
    'pageBuilder': 'Shogun',
    'clientName': 'Acme, Inc.',
    'websiteLink': 'https://acme.example.com',
    'bidPlatform': 'Upwork',
    'bidPlatformUrl': 'https://upwork.example.com/job/1',
    'invoiceAmount': 1500.0,
    'startDate': '2024-02-01',
    'completionDate': '2024-03-15',
    'testimonials': 'Great work',
    'tag': ['retail', 'b2c'],
    'clientInvoices': ['a.pdf', 'b.pdf'],
}


def _lines(text):
    assert text.startswith(BOM)
    return text[len(BOM):].splitlines()


def test_header_row():
    lines = _lines(export_portfolios([]))
    assert lines == [','.join(EXPORT_HEADERS)]
    assert len(EXPORT_HEADERS) == 16


def test_record_row_values():
    row = dict(zip(EXPORT_HEADERS, record_to_row(RECORD)))
    assert row['Description'] == 'A storefront with "custom" checkout'
    assert row['Invoice Amount'] == '1500'
    assert row['Start Date'] == '01/02/2024'
    assert row['Completion Date'] == '15/03/2024'
    assert row['Tag'] == 'retail, b2c'
    assert row['Client Invoices'] == 'a.pdf | b.pdf'


def test_quoting():
    line = _lines(export_portfolios([RECORD]))[1]
    assert '"Acme, Inc."' in line
    assert '"A storefront with ""custom"" checkout"' in line
    assert len(_lines(export_portfolios([RECORD]))) == 2


def test_formula_cells_are_prefixed():
    record = dict(RECORD, projectName='=HYPERLINK("http://evil.example")',
                  clientName='@admin', description='-5 days')
    row = _lines(export_portfolios([record]))[1]
    assert row.startswith('"\'=HYPERLINK(""http://evil.example"")",')
    assert ",'@admin," in row
    assert ",'-5 days," in row

    assert sanitize_csv_value('+1') == "'+1"
    assert sanitize_csv_value('plain') == 'plain'
    assert sanitize_csv_value('') == ''


def test_formula_cells_survive_round_trip():
    record = dict(RECORD, projectName='=Totals', description='-5 days')
    _, rows, _ = parse_csv(export_portfolios([record]))
    assert rows[0]['Project Name'] == '=Totals'
    assert rows[0]['Description'] == '-5 days'


def test_truncation_and_image_placeholder():
    assert sanitize_text('x' * 60, 50) == 'x' * 47 + '...'
    assert len(sanitize_text('word ' * 100, 200)) <= 200
    assert sanitize_text('data:image/png;base64,AAAA', 200) == '[IMAGE]'
    assert sanitize_text(None) == ''


def test_amount_formatting():
    assert format_amount(None) == ''
    assert format_amount(2500) == '2500'
    assert format_amount(99.5) == '99.5'


def test_bad_record_becomes_error_row():
    bad = dict(RECORD, invoiceAmount='not a number')
    lines = _lines(export_portfolios([bad, RECORD]))
    assert lines[1] == ','.join(['ERROR'] * 16)
    assert lines[2].startswith('Acme Shop,')


def test_export_then_import_round_trip():
    records = [
        RECORD,
        dict(RECORD, projectName='Second Site', technology='Webflow', tag=[], clientInvoices=[]),
    ]
    text = export_portfolios(records)

    _, rows, _ = parse_csv(text)
    assert [(r['Project Name'], r['Technology']) for r in rows] == [
        ('Acme Shop', 'Shopify'), ('Second Site', 'Webflow'),
    ]

    store = FakeStore()
    outcome = PortfolioImporter(store).run(text)
    assert [(p['projectName'], p['technology']) for p in store.created] == [
        ('Acme Shop', 'Shopify'), ('Second Site', 'Webflow'),
    ]
    assert outcome.skipped == []
    first = store.created[0]
    assert first['startDate'] == '2024-02-01'
    assert first['invoiceAmount'] == 1500.0
    assert first['tag'] == ['retail', 'b2c']
    assert first['clientInvoices'] == ['a.pdf', 'b.pdf']
