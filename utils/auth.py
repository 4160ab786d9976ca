"""
Authentication and authorization utilities.

Provides decorators and helpers for protecting routes with role-based access control.
The data service re-checks every rule; these decorators only fail fast at the edge.
"""

from functools import wraps
from flask import jsonify
from flask_login import login_required, current_user

from models import db, Profile, UserRole


def current_uid():
    """Acting identity for policy checks: the account id, or None when anonymous."""
    if current_user and current_user.is_authenticated:
        return current_user.id
    return None


def current_profile():
    uid = current_uid()
    if uid is None:
        return None
    return db.session.get(Profile, uid)


def ceo_required(f):
    """
    Decorator to protect routes requiring the CEO role.

    Ensures:
    1. User is authenticated (via login_required)
    2. User has a profile
    3. The profile's role is ceo

    Returns 403 Forbidden otherwise.
    """
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        profile = current_profile()
        if profile is None:
            return jsonify({
                'success': False,
                'message': 'Profile not found'
            }), 403

        if profile.role != UserRole.CEO:
            return jsonify({
                'success': False,
                'message': 'CEO privileges required'
            }), 403

        return f(*args, **kwargs)

    return decorated_function
