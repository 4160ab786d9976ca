"""
Authentication Routes
Registration, login, logout, current session and access tokens (JSON).
"""

import logging

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user

from extensions import limiter
from models import db, Profile
from services import task_service
from services.errors import StoreError, AuthError
from services.identity_service import get_identity_service
from utils.api_errors import store_error_response, unexpected_error_response
from utils.auth import current_uid

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _login_limit():
    return current_app.config.get("LOGIN_RATE_LIMIT", "5 per minute")


def _register_limit():
    return current_app.config.get("REGISTER_RATE_LIMIT", "3 per minute")


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip()
    return None


def _session_payload(user, profile):
    return {
        'authenticated': user is not None,
        'user': user.to_dict() if user else None,
        'profile': profile.to_dict() if profile else None,
        'is_ceo': bool(profile and profile.is_ceo),
    }


@auth_bp.route('/register', methods=['POST'])
@limiter.limit(_register_limit)
def register():
    """Create an account (its profile is provisioned automatically) and log it in."""
    data = request.get_json(silent=True) or {}
    try:
        user = get_identity_service().create_account(
            data.get('email', ''),
            data.get('password', ''),
            data.get('full_name', ''),
        )
        login_user(user)
        profile = db.session.get(Profile, user.id)
        logger.info(f"Registration successful for account {user.id}")
        return jsonify({'success': True, **_session_payload(user, profile)}), 201
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'register')


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(_login_limit)
def login():
    data = request.get_json(silent=True) or {}
    try:
        user = get_identity_service().authenticate(data.get('email', ''), data.get('password', ''))
        login_user(user, remember=bool(data.get('remember_me')))
        profile = db.session.get(Profile, user.id)
        logger.info(f"Login successful for account {user.id}")
        return jsonify({'success': True, **_session_payload(user, profile)})
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'log in')


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True, 'message': 'You have been logged out successfully'})


@auth_bp.route('/session', methods=['GET'])
def session_state():
    """Current user and profile; an account without a profile is logged out."""
    if not current_user.is_authenticated:
        return jsonify({'success': True, **_session_payload(None, None)})

    profile = db.session.get(Profile, current_user.id)
    if profile is None:
        logger.warning(f"Account {current_user.id} has no profile; ending its session")
        logout_user()
        return jsonify({'success': True, 'invalidated': True, **_session_payload(None, None)})

    return jsonify({'success': True, **_session_payload(current_user, profile)})


@auth_bp.route('/profile', methods=['PATCH'])
@login_required
def edit_profile():
    data = request.get_json(silent=True) or {}
    try:
        profile = task_service.update_profile(current_uid(), current_user.id, data.get('full_name'))
        return jsonify({'success': True, 'profile': profile.to_dict()})
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'update profile')


@auth_bp.route('/token', methods=['POST'])
@limiter.limit(_login_limit)
def issue_token():
    """Exchange credentials for a bearer access token."""
    data = request.get_json(silent=True) or {}
    try:
        session = get_identity_service().create_session(data.get('email', ''), data.get('password', ''))
        return jsonify({'success': True, 'session': session.to_dict()}), 201
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'sign in')


@auth_bp.route('/token/refresh', methods=['POST'])
def refresh_token():
    data = request.get_json(silent=True) or {}
    token = data.get('access_token') or _bearer_token()
    try:
        if not token:
            raise AuthError("access_token is required", status_code=400)
        session = get_identity_service().refresh_session(token)
        return jsonify({'success': True, 'session': session.to_dict()})
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'refresh session')


@auth_bp.route('/token/revoke', methods=['POST'])
def revoke_token():
    data = request.get_json(silent=True) or {}
    token = data.get('access_token') or _bearer_token()
    try:
        if token:
            get_identity_service().revoke_session(token)
        return jsonify({'success': True})
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'sign out')
