"""
Public Module
=============

Read-only portfolio and taxonomy API for the public site. No auth.
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__, url_prefix='/api/public')

from . import routes

__all__ = ['public_bp']
