"""
Portfolio Module
================

REST API for client project portfolios.

Provides:
- Project creation, editing and (bulk) deletion
- Listing by name and by category
- CSV import with header aliases and duplicate detection
- CSV export for spreadsheets
"""

from flask import Blueprint

portfolio_bp = Blueprint('portfolio', __name__, url_prefix='/api/portfolios')

from . import routes
from .database import init_portfolio_db

__all__ = ['portfolio_bp', 'init_portfolio_db']
