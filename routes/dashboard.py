"""
Dashboard Routes
Summary counts and tasks grouped by sector, as rendered on the dashboard page.
"""

from flask import Blueprint, jsonify

from services.dashboard_stats import build_dashboard
from services.errors import StoreError
from utils.api_errors import store_error_response, unexpected_error_response
from utils.auth import current_uid, current_profile

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api/dashboard')


@dashboard_bp.route('/', methods=['GET'])
def index():
    try:
        data = build_dashboard(current_uid())
        profile = current_profile()
        return jsonify({
            'success': True,
            'profile': profile.to_dict() if profile else None,
            'is_ceo': bool(profile and profile.is_ceo),
            **data,
        })
    except StoreError as e:
        return store_error_response(e)
    except Exception as e:
        return unexpected_error_response(e, 'load dashboard')
