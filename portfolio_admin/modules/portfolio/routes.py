"""
Portfolio Routes
================

CRUD for client projects plus CSV import/export.
Reads and writes need a signed-in user; deletes are admin only.
"""

from datetime import datetime

from flask import request, jsonify, Response

from . import portfolio_bp
from .database import (
    PortfolioError,
    list_portfolios,
    get_portfolio,
    get_portfolios_by_ids,
    get_portfolios_by_category,
    create_portfolio,
    update_portfolio,
    delete_portfolio,
    bulk_delete_portfolios,
)
from .exporter import export_portfolios
from .importer import PortfolioImporter
from .store import LocalPortfolioStore
from ..auth.utils import login_required, admin_required
from ...core.logging_service import LoggingService


def _payload():
    """JSON body, or a multipart/urlencoded form as a plain dict"""
    data = request.get_json(silent=True)
    if data is not None:
        return data
    return request.form.to_dict()


def _parse_ids(values):
    ids = []
    for value in values:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid id: {value}")
    return ids


@portfolio_bp.route('', methods=['POST'])
@portfolio_bp.route('/', methods=['POST'])
@login_required
def create():
    try:
        portfolio = create_portfolio(_payload())
    except PortfolioError as e:
        return jsonify({'message': str(e)}), e.status
    except Exception as e:
        LoggingService.log_error_with_traceback('portfolio', e)
        return jsonify({'message': 'Failed to create portfolio', 'error': str(e)}), 500

    LoggingService.log_user_action('portfolio', f"create {portfolio['projectName']}")
    return jsonify({'message': 'Portfolio created successfully', 'portfolio': portfolio}), 201


@portfolio_bp.route('', methods=['GET'])
@portfolio_bp.route('/', methods=['GET'])
@login_required
def list_all():
    try:
        return jsonify(list_portfolios(request.args.get('q')))
    except Exception as e:
        LoggingService.log_error_with_traceback('portfolio', e)
        return jsonify({'message': 'Failed to fetch portfolios', 'error': str(e)}), 500


@portfolio_bp.route('/category/<category>', methods=['GET'])
@login_required
def by_category(category):
    if not category.strip():
        return jsonify({'message': 'category is required'}), 400
    try:
        return jsonify(get_portfolios_by_category(category))
    except Exception as e:
        LoggingService.log_error_with_traceback('portfolio', e)
        return jsonify({'message': 'Failed to fetch portfolios by category', 'error': str(e)}), 500


@portfolio_bp.route('/<int:portfolio_id>', methods=['GET'])
@login_required
def get_one(portfolio_id):
    portfolio = get_portfolio(portfolio_id)
    if not portfolio:
        return jsonify({'message': 'Portfolio not found'}), 404
    return jsonify(portfolio)


@portfolio_bp.route('/<int:portfolio_id>', methods=['PUT', 'PATCH'])
@login_required
def update(portfolio_id):
    try:
        portfolio = update_portfolio(portfolio_id, _payload())
    except PortfolioError as e:
        return jsonify({'message': str(e)}), e.status
    except Exception as e:
        LoggingService.log_error_with_traceback('portfolio', e)
        return jsonify({'message': 'Failed to update portfolio', 'error': str(e)}), 500

    if not portfolio:
        return jsonify({'message': 'Portfolio not found'}), 404
    return jsonify({'message': 'Portfolio updated successfully', 'portfolio': portfolio})


@portfolio_bp.route('/<int:portfolio_id>', methods=['DELETE'])
@admin_required
def delete(portfolio_id):
    try:
        deleted = delete_portfolio(portfolio_id)
    except Exception as e:
        LoggingService.log_error_with_traceback('portfolio', e)
        return jsonify({'message': 'Failed to delete portfolio', 'error': str(e)}), 500

    if not deleted:
        return jsonify({'message': 'Portfolio not found'}), 404

    LoggingService.log_user_action('portfolio', f"delete {portfolio_id}")
    return jsonify({'message': 'Portfolio deleted successfully'})


@portfolio_bp.route('/bulk-delete', methods=['POST'])
@admin_required
def bulk_delete():
    data = request.get_json(silent=True) or {}
    ids = data.get('ids')
    if not isinstance(ids, list) or not ids:
        return jsonify({'message': 'ids must be a non-empty list'}), 400

    try:
        ids = _parse_ids(ids)
        deleted = bulk_delete_portfolios(ids)
    except ValueError as e:
        return jsonify({'message': str(e)}), 400
    except Exception as e:
        LoggingService.log_error_with_traceback('portfolio', e)
        return jsonify({'message': 'Failed to delete portfolios', 'error': str(e)}), 500

    LoggingService.log_user_action('portfolio', 'bulk delete', details={'ids': ids, 'deleted': deleted})
    return jsonify({'message': f"{deleted} portfolio(s) deleted", 'deleted': deleted})


# ===== CSV =====

@portfolio_bp.route('/import', methods=['POST'])
@login_required
def import_csv():
    """Import a CSV upload (multipart field 'file') or a raw text/csv body"""
    upload = request.files.get('file')
    if upload is not None:
        if not upload.filename or not upload.filename.lower().endswith('.csv'):
            return jsonify({'message': 'Please upload a .csv file'}), 400
        raw = upload.read()
    else:
        raw = request.get_data()

    try:
        text = raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        return jsonify({'message': 'CSV file must be UTF-8 encoded'}), 400

    try:
        outcome = PortfolioImporter(LocalPortfolioStore()).run(text)
    except Exception as e:
        LoggingService.log_error_with_traceback('import', e)
        return jsonify({'message': 'Import failed', 'error': str(e)}), 500

    LoggingService.log_user_action('import', f"CSV import: {outcome.summary()}",
                                   details=outcome.to_dict())
    return jsonify(outcome.to_dict())


@portfolio_bp.route('/export', methods=['GET'])
@login_required
def export_csv():
    """Download portfolios as CSV; ?ids=1,2,3 limits the export"""
    ids_arg = request.args.get('ids', '').strip()
    try:
        if ids_arg:
            records = get_portfolios_by_ids(_parse_ids(ids_arg.split(',')))
        else:
            records = list_portfolios()
    except ValueError as e:
        return jsonify({'message': str(e)}), 400
    except Exception as e:
        LoggingService.log_error_with_traceback('export', e)
        return jsonify({'message': 'Failed to export portfolios', 'error': str(e)}), 500

    content = export_portfolios(records)
    filename = f"projects_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    LoggingService.log_user_action('export', f"CSV export of {len(records)} portfolio(s)")

    return Response(
        content.encode('utf-8'),
        mimetype='text/csv',
        headers={
            'Content-Disposition': f'attachment; filename={filename}',
            'Content-Type': 'text/csv; charset=utf-8',
        },
    )
