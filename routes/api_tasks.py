"""
Tasks API Routes
REST API endpoints for task listing, creation, closing and deletion.
"""

import logging

from flask import Blueprint, request, jsonify

from services import task_service
from services.errors import StoreError
from utils.api_errors import store_error_response, unexpected_error_response
from utils.auth import ceo_required, current_uid

logger = logging.getLogger(__name__)

api_tasks_bp = Blueprint('api_tasks', __name__, url_prefix='/api/tasks')


@api_tasks_bp.route('/', methods=['GET'])
def list_tasks():
    """Tasks ordered by deadline, each with its sector. Optional sector_id/status filters."""
    try:
        tasks = task_service.list_tasks(
            current_uid(),
            sector_id=request.args.get('sector_id') or None,
            status=request.args.get('status') or None,
        )
        return jsonify({
            'success': True,
            'tasks': [t.to_dict(include_sector=True) for t in tasks],
            'total': len(tasks),
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'load tasks')


@api_tasks_bp.route('/<uuid:task_id>', methods=['GET'])
def get_task(task_id):
    try:
        task = task_service.get_task(current_uid(), task_id)
        return jsonify({'success': True, 'task': task.to_dict(include_sector=True)})
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'load task')


@api_tasks_bp.route('/', methods=['POST'])
@ceo_required
def create_task():
    data = request.get_json(silent=True) or {}
    try:
        task = task_service.create_task(
            current_uid(),
            title=data.get('title'),
            type=data.get('type'),
            sector_id=data.get('sector_id'),
            deadline=data.get('deadline'),
            description=data.get('description'),
            urgency=data.get('urgency') or 'not_urgent',
        )
        return jsonify({
            'success': True,
            'message': 'New task has been successfully created.',
            'task': task.to_dict(include_sector=True),
        }), 201
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'create task')


@api_tasks_bp.route('/<uuid:task_id>/status', methods=['PUT'])
@ceo_required
def update_task_status(task_id):
    """Close (or reopen) a task with an optional CEO observation."""
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return jsonify({'success': False, 'message': 'Status is required'}), 400

    try:
        task = task_service.update_task_status(
            current_uid(), task_id, data.get('status'), data.get('ceo_observation')
        )
        return jsonify({
            'success': True,
            'message': f"Task marked as {task.status.value.replace('_', ' ')}.",
            'task': task.to_dict(include_sector=True),
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'update task status')


@api_tasks_bp.route('/<uuid:task_id>', methods=['DELETE'])
@ceo_required
def delete_task(task_id):
    try:
        task_service.delete_task(current_uid(), task_id)
        return jsonify({
            'success': True,
            'message': 'Task has been successfully deleted.',
            'task_id': str(task_id),
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'delete task')


@api_tasks_bp.route('/<uuid:task_id>/history', methods=['GET'])
def task_history(task_id):
    """Status transitions of a task, oldest first."""
    try:
        entries = task_service.list_task_history(current_uid(), task_id)
        return jsonify({
            'success': True,
            'task_id': str(task_id),
            'history': [h.to_dict() for h in entries],
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'load task history')
