"""
Sectors API Routes
Listing is open to everyone; create/rename/delete require the CEO role.
"""

import logging

from flask import Blueprint, request, jsonify

from services import task_service
from services.errors import StoreError
from utils.api_errors import store_error_response, unexpected_error_response
from utils.auth import ceo_required, current_uid

logger = logging.getLogger(__name__)

api_sectors_bp = Blueprint('api_sectors', __name__, url_prefix='/api/sectors')


@api_sectors_bp.route('/', methods=['GET'])
def list_sectors():
    """All sectors ordered by name."""
    try:
        sectors = task_service.list_sectors(current_uid())
        return jsonify({
            'success': True,
            'sectors': [s.to_dict() for s in sectors],
            'total': len(sectors),
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'load sectors')


@api_sectors_bp.route('/', methods=['POST'])
@ceo_required
def create_sector():
    data = request.get_json(silent=True) or {}
    try:
        sector = task_service.create_sector(current_uid(), data.get('name'))
        return jsonify({
            'success': True,
            'message': 'New sector has been successfully created.',
            'sector': sector.to_dict(),
        }), 201
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'create sector')


@api_sectors_bp.route('/<uuid:sector_id>', methods=['PUT', 'PATCH'])
@ceo_required
def update_sector(sector_id):
    data = request.get_json(silent=True) or {}
    try:
        sector = task_service.update_sector(current_uid(), sector_id, data.get('name'))
        return jsonify({
            'success': True,
            'message': 'Sector name has been successfully updated.',
            'sector': sector.to_dict(),
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'update sector')


@api_sectors_bp.route('/<uuid:sector_id>/task-count', methods=['GET'])
def sector_task_count(sector_id):
    """Number of tasks in the sector, for the confirmation shown before deleting it."""
    try:
        count = task_service.count_sector_tasks(current_uid(), sector_id)
        if count > 0:
            confirmation = (
                f'This sector has {count} task(s). Are you sure you want to delete it? '
                'This action cannot be undone.'
            )
        else:
            confirmation = 'Are you sure you want to delete this sector?'
        return jsonify({
            'success': True,
            'sector_id': str(sector_id),
            'task_count': count,
            'confirmation': confirmation,
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'count sector tasks')


@api_sectors_bp.route('/<uuid:sector_id>', methods=['DELETE'])
@ceo_required
def delete_sector(sector_id):
    """Delete a sector. Refused with 409 while tasks still reference it."""
    try:
        task_service.delete_sector(current_uid(), sector_id)
        return jsonify({
            'success': True,
            'message': 'Sector has been successfully deleted.',
            'sector_id': str(sector_id),
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'delete sector')
