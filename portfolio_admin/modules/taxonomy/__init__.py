"""
Taxonomy Module
===============

Supporting vocabularies for portfolios: categories, technologies, tags
and industries, each with a usage count.
"""

from flask import Blueprint

taxonomy_bp = Blueprint('taxonomy', __name__, url_prefix='/api')

from . import routes
from .database import TAXONOMIES, init_taxonomy_tables

__all__ = ['taxonomy_bp', 'TAXONOMIES', 'init_taxonomy_tables']
