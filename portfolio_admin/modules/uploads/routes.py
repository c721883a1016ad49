"""
Upload Routes
=============

POST /api/upload takes up to MAX_UPLOAD_FILES files in the multipart
field ``files`` and returns their public URLs in upload order. Files kept
in the local UPLOAD_FOLDER are served back under /uploads/.
"""

import os
import uuid

from flask import request, jsonify, send_from_directory
from werkzeug.utils import secure_filename

from . import uploads_bp, uploaded_files_bp
from ..auth.utils import login_required
from ...core.config import get_config_value
from ...core.logging_service import LoggingService
from ...core.storage import upload_file

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'pdf'}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _subfolder(extension):
    return 'invoices' if extension == 'pdf' else 'images'


@uploads_bp.route('', methods=['POST'])
@uploads_bp.route('/', methods=['POST'])
@login_required
def upload():
    files = [f for f in request.files.getlist('files') if f and f.filename]
    if not files:
        return jsonify({'message': 'No files uploaded'}), 400

    max_files = int(get_config_value('MAX_UPLOAD_FILES', 10))
    if len(files) > max_files:
        return jsonify({'message': f'You can upload at most {max_files} files'}), 400

    for f in files:
        if not allowed_file(f.filename):
            return jsonify({'message': f'Invalid file type: {f.filename}'}), 400

    urls = []
    try:
        for f in files:
            safe_name = secure_filename(f.filename)
            extension = safe_name.rsplit('.', 1)[1].lower() if '.' in safe_name else 'bin'
            unique_filename = f"{uuid.uuid4().hex}.{extension}"
            urls.append(upload_file(f.read(), unique_filename, _subfolder(extension)))
    except Exception as e:
        LoggingService.log_error_with_traceback('uploads', e)
        return jsonify({'message': 'Failed to upload files', 'error': str(e)}), 500

    LoggingService.log_user_action('uploads', f"uploaded {len(urls)} file(s)")
    return jsonify({'urls': urls})


@uploaded_files_bp.route('/<path:filename>', methods=['GET'])
def uploaded_file(filename):
    upload_root = os.path.abspath(get_config_value('UPLOAD_FOLDER'))
    return send_from_directory(upload_root, filename)
