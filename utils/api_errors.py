"""
JSON error responses shared by the API blueprints.
"""

import logging

from flask import jsonify

from models import db
from services.errors import StoreError

logger = logging.getLogger(__name__)


def store_error_response(error: StoreError):
    """Known failure: the session is already rolled back by the service layer."""
    return jsonify(error.to_dict()), error.status_code


def unexpected_error_response(error: Exception, action: str):
    """Unknown failure: roll back, log with traceback, answer with a generic 500."""
    db.session.rollback()
    logger.exception(f"Unexpected error during {action}: {error}")
    return jsonify({
        'success': False,
        'message': f'Failed to {action}. Please try again.'
    }), 500
