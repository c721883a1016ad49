"""
Public Routes
=============

Public-facing portfolio listing, detail and taxonomy lists.
"""

from flask import jsonify, request

from . import public_bp
from ..portfolio.database import list_portfolios, get_portfolio, get_portfolios_by_category
from ..taxonomy.database import list_entries
from ...core.logging_service import LoggingService

TAXONOMY_KIND = '<any(categories, technologies, tags, industries):kind>'


@public_bp.route('/portfolios', methods=['GET'])
def portfolios():
    try:
        category = request.args.get('category', '').strip()
        if category:
            return jsonify(get_portfolios_by_category(category))
        return jsonify(list_portfolios(request.args.get('q')))
    except Exception as e:
        LoggingService.log_error_with_traceback('public', e)
        return jsonify({'message': 'Failed to fetch portfolios', 'error': str(e)}), 500


@public_bp.route('/portfolios/<int:portfolio_id>', methods=['GET'])
def portfolio_detail(portfolio_id):
    portfolio = get_portfolio(portfolio_id)
    if not portfolio:
        return jsonify({'message': 'Portfolio not found'}), 404
    return jsonify(portfolio)


@public_bp.route(f'/{TAXONOMY_KIND}', methods=['GET'])
def taxonomy(kind):
    try:
        return jsonify(list_entries(kind))
    except Exception as e:
        LoggingService.log_error_with_traceback('public', e)
        return jsonify({'message': f"Failed to fetch {kind}", 'error': str(e)}), 500
