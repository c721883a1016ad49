"""
Taxonomy Routes
===============

/api/categories, /api/technologies, /api/tags and /api/industries all
behave the same way, so one set of views serves every kind.
"""

from flask import request, jsonify

from . import taxonomy_bp
from .database import (
    TaxonomyError,
    label,
    list_entries,
    get_entry,
    create_entry,
    update_entry,
    delete_entry,
)
from ..auth.utils import login_required, admin_required
from ...core.logging_service import LoggingService

KIND = '<any(categories, technologies, tags, industries):kind>'


@taxonomy_bp.route(f'/{KIND}', methods=['GET'])
@login_required
def list_kind(kind):
    try:
        return jsonify(list_entries(kind))
    except Exception as e:
        LoggingService.log_error_with_traceback('taxonomy', e)
        return jsonify({'message': f"Failed to fetch {kind}", 'error': str(e)}), 500


@taxonomy_bp.route(f'/{KIND}/<int:entry_id>', methods=['GET'])
@login_required
def get_kind(kind, entry_id):
    entry = get_entry(kind, entry_id)
    if not entry:
        return jsonify({'message': f"{label(kind)} not found"}), 404
    return jsonify(entry)


@taxonomy_bp.route(f'/{KIND}', methods=['POST'])
@login_required
def create_kind(kind):
    try:
        entry = create_entry(kind, request.get_json(silent=True) or {})
    except TaxonomyError as e:
        return jsonify({'message': str(e)}), e.status
    except Exception as e:
        LoggingService.log_error_with_traceback('taxonomy', e)
        return jsonify({'message': f"Failed to create {label(kind).lower()}", 'error': str(e)}), 500

    LoggingService.log_user_action('taxonomy', f"create {kind}: {entry['name']}")
    return jsonify({'message': f"{label(kind)} created successfully", 'item': entry}), 201


@taxonomy_bp.route(f'/{KIND}/<int:entry_id>', methods=['PUT', 'PATCH'])
@login_required
def update_kind(kind, entry_id):
    try:
        entry = update_entry(kind, entry_id, request.get_json(silent=True) or {})
    except TaxonomyError as e:
        return jsonify({'message': str(e)}), e.status
    except Exception as e:
        LoggingService.log_error_with_traceback('taxonomy', e)
        return jsonify({'message': f"Failed to update {label(kind).lower()}", 'error': str(e)}), 500

    if not entry:
        return jsonify({'message': f"{label(kind)} not found"}), 404
    return jsonify({'message': f"{label(kind)} updated successfully", 'item': entry})


@taxonomy_bp.route(f'/{KIND}/<int:entry_id>', methods=['DELETE'])
@admin_required
def delete_kind(kind, entry_id):
    try:
        deleted = delete_entry(kind, entry_id)
    except Exception as e:
        LoggingService.log_error_with_traceback('taxonomy', e)
        return jsonify({'message': f"Failed to delete {label(kind).lower()}", 'error': str(e)}), 500

    if not deleted:
        return jsonify({'message': f"{label(kind)} not found"}), 404

    LoggingService.log_user_action('taxonomy', f"delete {kind} {entry_id}")
    return jsonify({'message': f"{label(kind)} deleted successfully"})
