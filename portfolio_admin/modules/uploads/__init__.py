"""
Uploads Module
==============

Screenshot and client invoice uploads for portfolio records.
"""

from flask import Blueprint

uploads_bp = Blueprint('uploads', __name__, url_prefix='/api/upload')

# Serves files saved to the local UPLOAD_FOLDER
uploaded_files_bp = Blueprint('uploaded_files', __name__, url_prefix='/uploads')

from . import routes

__all__ = ['uploads_bp', 'uploaded_files_bp']
